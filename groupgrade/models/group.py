from sqlalchemy import Column, Integer, String, ForeignKey, Table
from sqlalchemy.orm import relationship
from groupgrade.database import Base

group_members = Table(
    "group_members",
    Base.metadata,
    Column("group_id", Integer, ForeignKey("groups.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)

class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    leader_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    project = relationship("Project", lazy="joined")
    leader = relationship("User", lazy="joined")
    members = relationship("User", secondary=group_members, lazy="selectin", order_by="User.id")

    def participants(self) -> list:
        """Members followed by the leader, without duplicates."""
        seen = set()
        users = []
        for user in list(self.members) + ([self.leader] if self.leader else []):
            if user.id not in seen:
                seen.add(user.id)
                users.append(user)
        return users
