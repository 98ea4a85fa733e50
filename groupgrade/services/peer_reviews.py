from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from groupgrade.models.peer_review import PeerReview

async def average_review_score(db: AsyncSession, user_id: int, project_id: int) -> float:
    """Mean score received from completed, valid reviews in the project (0.0 when none)."""
    result = await db.execute(
        select(func.avg(PeerReview.score))
        .where(PeerReview.reviewee_id == user_id)
        .where(PeerReview.project_id == project_id)
        .where(PeerReview.is_completed.is_(True))
        .where(PeerReview.is_valid.is_(True))
        .where(PeerReview.score.isnot(None))
    )
    avg_score = result.scalar_one()

    # avg() may come back as Decimal
    if avg_score is None:
        return 0.0
    return float(avg_score)
