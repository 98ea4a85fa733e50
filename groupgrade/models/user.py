from sqlalchemy import Column, Integer, String, DateTime
from groupgrade.database import Base
from groupgrade.time_utils import utcnow

ROLE_STUDENT = "student"
ROLE_INSTRUCTOR = "instructor"
ROLE_ADMIN = "admin"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)
    full_name = Column(String, nullable=True)
    email = Column(String, nullable=False)
    roles = Column(String, nullable=False, default=ROLE_STUDENT)  # comma-separated: student,instructor,admin
    created_at = Column(DateTime(timezone=True), default=utcnow)

    @property
    def role_set(self) -> set:
        return {r.strip() for r in (self.roles or "").split(",") if r.strip()}

    def has_role(self, *roles: str) -> bool:
        return bool(self.role_set.intersection(roles))
