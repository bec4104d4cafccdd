import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routers import attempts, quizzes, users
from core.config import settings
from core.exceptions import QuizHostError
from core.logger import logger

# API Documentation
API_DESCRIPTION = """
## QuizHost API

Author multiple-choice quizzes and take them for a score.

### Authentication

Register or log in to receive a signed token, then send it as either:

- Header: `Authorization: Bearer <token>`
- Header: `X-Auth-Token: <token>`

Tokens expire after 30 days.

### Attempts

1. `POST /api/quizzes/{id}/attempt` starts an attempt and returns the quiz without its answer key.
2. `POST /api/attempts/{id}/submit` scores the answers. An attempt can be submitted once.
"""

TAGS_METADATA = [
    {"name": "users", "description": "Registration, login and profile."},
    {"name": "quizzes", "description": "Quiz and question CRUD, starting attempts."},
    {"name": "attempts", "description": "Submitting and reviewing attempts."},
    {"name": "info", "description": "Public information endpoints."},
]

app = FastAPI(
    title="QuizHost API",
    description=API_DESCRIPTION,
    version="1.0.0",
    openapi_tags=TAGS_METADATA,
    docs_url="/docs",
    redoc_url="/redoc",
    license_info={
        "name": "MIT",
    },
)


@app.middleware("http")
async def bind_request_context(request: Request, call_next):
    structlog.contextvars.clear_contextvars()
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path, method=request.method)

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QuizHostError)
async def handle_quizhost_error(request: Request, exc: QuizHostError):
    logger.info("Request rejected", status=exc.status_code, reason=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error", error=str(exc))
    return JSONResponse(status_code=500, content={"success": False, "message": "Something went wrong"})


app.include_router(users.router)
app.include_router(quizzes.router)
app.include_router(attempts.router)


@app.get("/", tags=["info"], summary="API information")
async def read_root():
    return {"message": "Welcome to QuizHost API", "version": app.version, "docs": app.docs_url}
