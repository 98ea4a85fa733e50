from sqlalchemy import Column, Integer, Float, Boolean, ForeignKey
from groupgrade.database import Base

class PeerReview(Base):
    __tablename__ = "peer_reviews"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    reviewee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    score = Column(Float, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    is_valid = Column(Boolean, nullable=False, default=True)
