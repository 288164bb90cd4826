import enum
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base
from sqlalchemy import *


Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PRStatus(str, enum.Enum):
    OPEN = 'OPEN'
    MERGED = 'MERGED'


class Team(Base):
    __tablename__ = 'teams'

    team_name = Column(String(255), primary_key=True)


class User(Base):
    __tablename__ = 'users'

    user_id = Column(String(255), primary_key=True)
    username = Column(String(255), nullable=False)
    is_active = Column(Boolean(), nullable=False, default=True, index=True)


class TeamMember(Base):
    __tablename__ = 'team_members'

    team_name = Column(String(255), ForeignKey('teams.team_name', ondelete='CASCADE'),
                       nullable=False, index=True)
    user_id = Column(String(255), ForeignKey('users.user_id', ondelete='CASCADE'),
                     nullable=False, index=True)

    __table_args__ = (
        PrimaryKeyConstraint('team_name', 'user_id'),
    )


class PullRequest(Base):
    __tablename__ = 'pull_requests'

    pull_request_id = Column(String(255), primary_key=True)
    pull_request_name = Column(String(500), nullable=False)
    author_id = Column(String(255), ForeignKey('users.user_id'), nullable=False, index=True)
    status = Column(String(16), nullable=False, default=PRStatus.OPEN.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    merged_at = Column(DateTime(timezone=True), nullable=True)


class PRReviewer(Base):
    """Current reviewer assignment; at most two rows per PR, kept by the engines."""
    __tablename__ = 'pr_reviewers'

    pull_request_id = Column(String(255),
                             ForeignKey('pull_requests.pull_request_id', ondelete='CASCADE'),
                             nullable=False, index=True)
    user_id = Column(String(255), ForeignKey('users.user_id', ondelete='CASCADE'),
                     nullable=False, index=True)

    __table_args__ = (
        PrimaryKeyConstraint('pull_request_id', 'user_id'),
    )
