from sqlalchemy import Column, Integer, String, JSON, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from models.base import Base, TimestampMixin

STATUS_STARTED = "started"
STATUS_COMPLETED = "completed"

class Attempt(Base, TimestampMixin):
    __tablename__ = "attempts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    # Attempts outlive their quiz; a deleted quiz leaves quiz_id empty
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="SET NULL"), index=True, nullable=True)

    status = Column(String(20), default=STATUS_STARTED, nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    finish_time = Column(DateTime, nullable=True)
    total_time_taken = Column(Integer, default=0, nullable=False)  # seconds

    # [{question_id, selected_choice, is_correct, points_earned, time_taken}]
    answers = Column(JSON, default=list, nullable=False)
    total_score = Column(Integer, default=0, nullable=False)
    percentage_score = Column(Integer, default=0, nullable=False)
    passed = Column(Boolean, default=False, nullable=False)
    timed_out = Column(Boolean, default=False, nullable=False)

    # Frozen [{id, right_answer, points}] when scoring against a snapshot
    answer_key = Column(JSON, nullable=True)

    # Title/category for attempt details and history; None once the quiz is gone
    quiz = relationship("Quiz", viewonly=True, lazy="selectin")

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED
