from sqlalchemy import Column, Integer, String, Text, JSON, Boolean, Float, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.ext.orderinglist import ordering_list
from models.base import Base, TimestampMixin

DIFFICULTIES = ("easy", "medium", "hard")

class Quiz(Base, TimestampMixin):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    time_limit = Column(Integer, nullable=True)  # minutes
    passing_score = Column(Integer, default=60, nullable=False)
    shuffle_questions = Column(Boolean, default=False, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    featured = Column(Boolean, default=False, nullable=False, index=True)  # set by admins

    # Aggregates: avg_score is always score_sum / attempts
    attempts = Column(Integer, default=0, nullable=False)
    score_sum = Column(Integer, default=0, nullable=False)
    avg_score = Column(Float, default=0.0, nullable=False)

    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def max_possible_score(self) -> int:
        return sum(q.points for q in self.questions)


class Question(Base, TimestampMixin):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), index=True, nullable=False)
    position = Column(Integer, default=0, nullable=False)
    text = Column(Text, nullable=False)
    choices = Column(JSON, nullable=False)  # ["choice A", "choice B", ...]
    right_answer = Column(Integer, nullable=False)  # 0-based index into choices
    explanation = Column(Text, nullable=True)
    points = Column(Integer, default=10, nullable=False)
    difficulty = Column(String(10), default="medium", nullable=False)

    quiz = relationship("Quiz", back_populates="questions")
