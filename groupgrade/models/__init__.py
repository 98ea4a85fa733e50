# Import every model so Base.metadata is complete for create_all / Alembic
from groupgrade.models.user import User
from groupgrade.models.project import Project
from groupgrade.models.group import Group, group_members
from groupgrade.models.task import Task
from groupgrade.models.commit import CommitRecord
from groupgrade.models.peer_review import PeerReview
from groupgrade.models.contribution import ContributionScore
from groupgrade.models.pressure import PressureScoreHistory
from groupgrade.models.notification import Notification

__all__ = [
    "User",
    "Project",
    "Group",
    "group_members",
    "Task",
    "CommitRecord",
    "PeerReview",
    "ContributionScore",
    "PressureScoreHistory",
    "Notification",
]
