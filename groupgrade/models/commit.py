from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from groupgrade.database import Base

class CommitRecord(Base):
    __tablename__ = "commit_records"

    id = Column(Integer, primary_key=True, index=True)
    commit_id = Column(String, nullable=False)
    message = Column(String, nullable=False, default="")
    author_name = Column(String, nullable=False)
    author_email = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=True, index=True)
    valid = Column(Boolean, nullable=False, default=True)  # set by commit ingestion
    additions = Column(Integer, nullable=True)
    deletions = Column(Integer, nullable=True)
