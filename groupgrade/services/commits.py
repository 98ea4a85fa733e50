from dataclasses import dataclass
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case
from groupgrade.models.commit import CommitRecord

@dataclass(frozen=True)
class CodeContributionStats:
    total_additions: int
    total_deletions: int

    def contribution_score(self, addition_weight: float = 1.0, deletion_weight: float = 1.25) -> float:
        return self.total_additions * addition_weight + self.total_deletions * deletion_weight

def _capped(column, cap: int):
    # NULL counts as 0; anything above the cap counts as the cap
    return case((column > cap, cap), else_=func.coalesce(column, 0))

async def aggregate_code_contribution(
    db: AsyncSession, task_ids: Sequence[int], cap: int
) -> CodeContributionStats:
    """Sum additions/deletions over valid commits linked to the tasks, capping each commit."""
    if not task_ids:
        return CodeContributionStats(0, 0)

    result = await db.execute(
        select(
            func.coalesce(func.sum(_capped(CommitRecord.additions, cap)), 0),
            func.coalesce(func.sum(_capped(CommitRecord.deletions, cap)), 0),
        )
        .where(CommitRecord.task_id.in_(list(task_ids)))
        .where(CommitRecord.valid.is_(True))
    )
    additions, deletions = result.one()
    return CodeContributionStats(int(additions), int(deletions))
