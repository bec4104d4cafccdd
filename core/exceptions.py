class QuizHostError(Exception):
    """Base class for expected, user-facing failures."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(QuizHostError):
    """A quiz, question, attempt or user does not exist."""
    status_code = 404


class ForbiddenError(QuizHostError):
    """The requester does not own the resource and is not an admin."""
    status_code = 403


class InvalidStateError(QuizHostError):
    """The attempt is not in a state that allows the operation."""
    status_code = 400


class InvalidRequestError(QuizHostError):
    status_code = 400


class AuthenticationError(QuizHostError):
    status_code = 401
