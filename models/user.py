from sqlalchemy import Column, Integer, String, Text, DateTime
from models.base import Base, TimestampMixin

class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), default="user", nullable=False)  # user, admin
    bio = Column(Text, nullable=True)
    avatar = Column(String(500), nullable=True)

    # Lifetime counters
    quizzes_taken = Column(Integer, default=0, nullable=False)
    quizzes_created = Column(Integer, default=0, nullable=False)

    last_login = Column(DateTime, nullable=True)
