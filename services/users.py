import enum
import logging
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.models import *
from services.teams import get_first_team_name


logger = logging.getLogger(__name__)


class ActivityUpdate(enum.Enum):
    UPDATED = "updated"
    NOT_FOUND = "not_found"


async def set_user_active(session: AsyncSession, user_id: str, is_active: bool) -> ActivityUpdate:
    """
    POST /users/setIsActive
    Unknown users are reported, not raised; the caller decides what that means.
    Existing review assignments are left as they are.
    """
    async with session.begin():
        result = await session.execute(
            update(User)
            .where(User.user_id == user_id)
            .values(is_active=is_active)
            .execution_options(synchronize_session=False)
        )

    if result.rowcount == 0:
        logger.info("setIsActive: user %s does not exist", user_id)
        return ActivityUpdate.NOT_FOUND

    logger.info("User %s is_active=%s", user_id, is_active)
    return ActivityUpdate.UPDATED


async def get_user(session: AsyncSession, user_id: str) -> Optional[Dict]:
    """User with the team used for its review pool, or None"""
    async with session.begin():
        result = await session.execute(
            select(User.user_id, User.username, User.is_active)
            .where(User.user_id == user_id)
        )
        row = result.first()
        if row is None:
            return None
        team_name = await get_first_team_name(session, user_id)

    return {
        "user_id": row.user_id,
        "username": row.username,
        "team_name": team_name or "",
        "is_active": row.is_active
    }


async def get_review(session: AsyncSession, user_id: str) -> List[Dict]:
    """
    GET /users/getReview
    PRs where the user is currently an assigned reviewer, open and merged.
    Unknown users simply have none.
    """
    async with session.begin():
        result = await session.execute(
            select(
                PullRequest.pull_request_id,
                PullRequest.pull_request_name,
                PullRequest.author_id,
                PullRequest.status
            )
            .join(PRReviewer, PullRequest.pull_request_id == PRReviewer.pull_request_id)
            .where(PRReviewer.user_id == user_id)
            .order_by(PullRequest.pull_request_id)
        )

        return [
            {
                "pull_request_id": pr_id,
                "pull_request_name": name,
                "author_id": author_id,
                "status": status
            }
            for pr_id, name, author_id, status in result.all()
        ]
