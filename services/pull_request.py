import logging
import random
from typing import Dict, List, Optional

from sqlalchemy import select, insert, update, delete, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

import config
import metrics
from models.models import *
from services.errors import (
    AuthorNotFound, AuthorHasNoTeam, PRAlreadyExists, PRNotFound,
    PRAlreadyMerged, UserNotFound, ReviewerNotAssigned, UserHasNoTeam
)
from services.picker import pick_random_distinct
from services.teams import get_first_team_name


logger = logging.getLogger(__name__)


async def _user_exists(session: AsyncSession, user_id: str) -> bool:
    result = await session.execute(
        select(User.user_id).where(User.user_id == user_id)
    )
    return result.first() is not None


async def _get_reviewer_ids(session: AsyncSession, pull_request_id: str) -> List[str]:
    result = await session.execute(
        select(PRReviewer.user_id)
        .where(PRReviewer.pull_request_id == pull_request_id)
        .order_by(PRReviewer.user_id)
    )
    return list(result.scalars().all())


async def _claim_open_pr(session: AsyncSession, pull_request_id: str, **values) -> bool:
    """
    Conditional write on an OPEN PR row, always the first statement of the
    transaction. It takes the row lock on PostgreSQL and the database write
    lock on SQLite, so concurrent merge/reassign calls on one PR run one
    after another. False when the PR is missing or already merged.
    """
    result = await session.execute(
        update(PullRequest)
        .where(
            and_(
                PullRequest.pull_request_id == pull_request_id,
                PullRequest.status == PRStatus.OPEN.value
            )
        )
        .values(**(values or {"status": PullRequest.status}))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def _lock_pr(session: AsyncSession, pull_request_id: str) -> Optional[PullRequest]:
    result = await session.execute(
        select(PullRequest)
        .where(PullRequest.pull_request_id == pull_request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _pr_to_dict(pr: PullRequest, reviewers: List[str]) -> Dict:
    return {
        "pull_request_id": pr.pull_request_id,
        "pull_request_name": pr.pull_request_name,
        "author_id": pr.author_id,
        "status": pr.status,
        "assigned_reviewers": reviewers,
        "createdAt": pr.created_at,
        "mergedAt": pr.merged_at
    }


async def create_pull_request(session: AsyncSession, pull_request_id: str, pull_request_name: str,
                              author_id: str, rng: Optional[random.Random] = None) -> Dict:
    """
    POST /pullRequest/create
    Create a PR and assign up to 2 random active reviewers from the author's team.
    Returns PR object
    """
    async with session.begin():
        if not await _user_exists(session, author_id):
            raise AuthorNotFound()

        team_name = await get_first_team_name(session, author_id)
        if team_name is None:
            raise AuthorHasNoTeam()

        if await session.get(PullRequest, pull_request_id) is not None:
            raise PRAlreadyExists()

        new_pr = PullRequest(
            pull_request_id=pull_request_id,
            pull_request_name=pull_request_name,
            author_id=author_id,
            status=PRStatus.OPEN.value,
            created_at=utcnow()
        )
        session.add(new_pr)
        try:
            await session.flush()
        except IntegrityError:
            # created concurrently after the check above
            raise PRAlreadyExists()

        # Active teammates, never the author
        candidates_result = await session.execute(
            select(User.user_id)
            .join(TeamMember, User.user_id == TeamMember.user_id)
            .where(
                and_(
                    TeamMember.team_name == team_name,
                    User.is_active == True,
                    User.user_id != author_id
                )
            )
            .order_by(User.user_id)
        )
        candidates = candidates_result.scalars().all()

        selected = pick_random_distinct(candidates, config.MAX_REVIEWERS, rng)
        if selected:
            await session.execute(
                insert(PRReviewer),
                [
                    {"pull_request_id": pull_request_id, "user_id": reviewer_id}
                    for reviewer_id in selected
                ]
            )

        await session.refresh(new_pr)
        pr = _pr_to_dict(new_pr, sorted(selected))

    metrics.PR_CREATED.inc()
    metrics.REVIEWERS_ASSIGNED.labels(team_name).observe(len(selected))
    logger.info("PR %s created by %s in team %s, reviewers: %s",
                pull_request_id, author_id, team_name, pr["assigned_reviewers"])
    return pr


async def merge_pull_request(session: AsyncSession, pull_request_id: str) -> Dict:
    """
    POST /pullRequest/merge
    Mark a PR as merged (idempotent operation).
    Only the call that flips OPEN to MERGED sets mergedAt.
    Returns PR object
    """
    async with session.begin():
        merged_now = await _claim_open_pr(
            session, pull_request_id,
            status=PRStatus.MERGED.value, merged_at=utcnow()
        )

        pr = await _lock_pr(session, pull_request_id)
        if pr is None:
            raise PRNotFound()

        reviewers = await _get_reviewer_ids(session, pull_request_id)
        result = _pr_to_dict(pr, reviewers)

    if merged_now:
        metrics.PR_MERGED.inc()
        logger.info("PR %s merged", pull_request_id)
    else:
        logger.info("PR %s is already merged", pull_request_id)
    return result


async def reassign_reviewer(session: AsyncSession, pull_request_id: str, old_user_id: str,
                            rng: Optional[random.Random] = None) -> Dict:
    """
    POST /pullRequest/reassign
    Replace a reviewer with a random active member of the reviewer's team.
    The old reviewer is removed even when nobody can take the slot;
    replaced_by is None in that case.
    Returns dict with pr and replaced_by
    """
    async with session.begin():
        is_open = await _claim_open_pr(session, pull_request_id)

        pr = await _lock_pr(session, pull_request_id)
        if pr is None:
            raise PRNotFound()

        if not is_open:
            raise PRAlreadyMerged()

        if not await _user_exists(session, old_user_id):
            raise UserNotFound()

        assigned = await session.execute(
            select(PRReviewer.user_id)
            .where(
                and_(
                    PRReviewer.pull_request_id == pull_request_id,
                    PRReviewer.user_id == old_user_id
                )
            )
        )
        if assigned.first() is None:
            raise ReviewerNotAssigned()

        team_name = await get_first_team_name(session, old_user_id)
        if team_name is None:
            raise UserHasNoTeam()

        # Active teammates that are neither the author nor assigned already,
        # the reviewer being replaced included
        candidates_result = await session.execute(
            select(User.user_id)
            .join(TeamMember, User.user_id == TeamMember.user_id)
            .outerjoin(
                PRReviewer,
                and_(
                    PRReviewer.user_id == User.user_id,
                    PRReviewer.pull_request_id == pull_request_id
                )
            )
            .where(
                and_(
                    TeamMember.team_name == team_name,
                    User.is_active == True,
                    User.user_id != pr.author_id,
                    PRReviewer.user_id.is_(None)
                )
            )
            .order_by(User.user_id)
        )
        candidates = candidates_result.scalars().all()

        await session.execute(
            delete(PRReviewer)
            .where(
                and_(
                    PRReviewer.pull_request_id == pull_request_id,
                    PRReviewer.user_id == old_user_id
                )
            )
            .execution_options(synchronize_session=False)
        )

        replaced_by = None
        picked = pick_random_distinct(candidates, 1, rng)
        if picked:
            replaced_by = picked[0]
            await session.execute(
                insert(PRReviewer).values(pull_request_id=pull_request_id, user_id=replaced_by)
            )

        reviewers = await _get_reviewer_ids(session, pull_request_id)
        result = {
            "pr": _pr_to_dict(pr, reviewers),
            "replaced_by": replaced_by
        }

    if replaced_by is None:
        logger.warning("PR %s: reviewer %s removed, no replacement candidate in team %s",
                       pull_request_id, old_user_id, team_name)
    else:
        logger.info("PR %s: reviewer %s replaced by %s", pull_request_id, old_user_id, replaced_by)
    return result
