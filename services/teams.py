import logging
from typing import Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

import metrics
from models.database import dialect_insert
from models.models import *
from schemas import TeamMember as TeamMemberSchema
from services.errors import TeamNotFound


logger = logging.getLogger(__name__)


async def get_first_team_name(session: AsyncSession, user_id: str) -> Optional[str]:
    """
    Team used as the reviewer pool for a user.
    Users may belong to several teams; the smallest team name wins so the
    choice does not depend on row order.
    """
    result = await session.execute(
        select(TeamMember.team_name)
        .where(TeamMember.user_id == user_id)
        .order_by(TeamMember.team_name)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def upsert_team(session: AsyncSession, team_name: str, members: List[TeamMemberSchema]) -> None:
    """
    POST /team/add
    Create the team if absent, upsert its members and add missing memberships.
    A repeated upsert updates usernames only; is_active is set for new users.
    All or nothing.
    """
    async with session.begin():
        await session.execute(
            dialect_insert(session, Team)
            .values(team_name=team_name)
            .on_conflict_do_nothing(index_elements=[Team.team_name])
        )

        for member in members:
            stmt = dialect_insert(session, User).values(
                user_id=member.user_id,
                username=member.username,
                is_active=member.is_active
            )
            await session.execute(
                stmt.on_conflict_do_update(
                    index_elements=[User.user_id],
                    set_={"username": stmt.excluded.username}
                )
            )
            await session.execute(
                dialect_insert(session, TeamMember)
                .values(team_name=team_name, user_id=member.user_id)
                .on_conflict_do_nothing(index_elements=[TeamMember.team_name, TeamMember.user_id])
            )

        member_count = await session.scalar(
            select(func.count()).select_from(TeamMember).where(TeamMember.team_name == team_name)
        )

    metrics.TEAM_MEMBERS.labels(team_name).set(member_count)
    logger.info("Team %s upserted with %d member(s)", team_name, len(members))


async def get_team(session: AsyncSession, team_name: str) -> Dict:
    """
    GET /team/get
    Team with members ordered by user_id.
    """
    async with session.begin():
        team = await session.get(Team, team_name)
        if team is None:
            raise TeamNotFound()

        result = await session.execute(
            select(User.user_id, User.username, User.is_active)
            .join(TeamMember, User.user_id == TeamMember.user_id)
            .where(TeamMember.team_name == team_name)
            .order_by(User.user_id)
        )

        members = [
            {
                "user_id": user_id,
                "username": username,
                "is_active": is_active
            }
            for user_id, username, is_active in result.all()
        ]

    return {
        "team_name": team_name,
        "members": members
    }
