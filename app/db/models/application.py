from uuid import uuid4
from sqlalchemy import Column, String, Integer, Float, Date, DateTime, Text, JSON, ForeignKey, Index
from app.db.base import Base


class Application(Base):
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    university_name = Column(String(100), nullable=False)
    degree = Column(String(50), nullable=False)
    priority = Column(String(10), nullable=False, default="Medium")
    number_of_semesters = Column(Integer, nullable=False)
    application_portal = Column(String, nullable=False)
    city = Column(String(50), nullable=False)
    country = Column(String(50), nullable=False)
    location = Column(String(100), nullable=False)
    starting_semester = Column(String(20), nullable=False)
    tuition_fees = Column(Float, nullable=False)
    living_expenses = Column(Float, nullable=False)
    documents_required = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="Draft")
    deadline = Column(Date, nullable=False)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_applications_user_created", "user_id", "created_at"),
    )
