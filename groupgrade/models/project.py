from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from groupgrade.database import Base
from groupgrade.time_utils import utcnow

class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Contribution weights: W1 + W2 + W3 must equal 1.0, W4 is an independent late penalty
    weight_w1 = Column(Float, nullable=False, default=0.5)  # task completion
    weight_w2 = Column(Float, nullable=False, default=0.3)  # peer review
    weight_w3 = Column(Float, nullable=False, default=0.2)  # code contribution
    weight_w4 = Column(Float, nullable=False, default=0.1)  # per late task

    freerider_threshold = Column(Float, nullable=False, default=0.3)
    pressure_threshold = Column(Integer, nullable=False, default=15)  # pressure score meaning "full load"

    is_finalized = Column(Boolean, nullable=False, default=False)  # False = active
    created_at = Column(DateTime(timezone=True), default=utcnow)

    instructor = relationship("User", lazy="joined")
