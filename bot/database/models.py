from sqlalchemy import (
    Column, Integer, DateTime, Date, BigInteger, UniqueConstraint, Index
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class ServerConfig(Base):
    __tablename__ = 'server_configs'

    id = Column(Integer, primary_key=True)
    server_id = Column(BigInteger, unique=True, nullable=False, index=True)
    announcement_channel_id = Column(BigInteger, nullable=True)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    def __repr__(self):
        return f"<ServerConfig(server_id={self.server_id}, channel={self.announcement_channel_id})>"

class LeaderboardEntry(Base):
    """Accumulated score of one user in one server for one calendar month"""
    __tablename__ = 'leaderboard_entries'

    id = Column(Integer, primary_key=True)
    server_id = Column(BigInteger, nullable=False)
    user_id = Column(BigInteger, nullable=False)

    # Rotation period key (month is 1-12)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)

    score = Column(Integer, nullable=False, default=0)

    # Daily submission guard
    last_submission_date = Column(Date, nullable=True)
    last_submission_at = Column(DateTime, nullable=True)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        UniqueConstraint('server_id', 'user_id', 'year', 'month', name='uq_leaderboard_entry_period'),
        Index('ix_leaderboard_entries_period_score', 'server_id', 'year', 'month', 'score'),
    )

    def __repr__(self):
        return (
            f"<LeaderboardEntry(server_id={self.server_id}, user_id={self.user_id}, "
            f"period={self.year}-{self.month:02d}, score={self.score})>"
        )

class ArchivedPeriod(Base):
    """Marks a closed month as resolved so rotation never processes it twice"""
    __tablename__ = 'archived_periods'

    id = Column(Integer, primary_key=True)
    server_id = Column(BigInteger, nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)

    # Winner snapshot (null when the month had no entries)
    winner_user_id = Column(BigInteger, nullable=True)
    winner_score = Column(Integer, nullable=True)

    archived_at = Column(DateTime, default=func.now())

    __table_args__ = (
        UniqueConstraint('server_id', 'year', 'month', name='uq_archived_period'),
    )

    def __repr__(self):
        return f"<ArchivedPeriod(server_id={self.server_id}, period={self.year}-{self.month:02d})>"
