from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date
from datetime import datetime

from htasks.constants import DEFAULT_DAILY_PROMPT_QUOTA
from htasks.database import Base


class Completion(Base):
    __tablename__ = "completions"

    id = Column(Integer, primary_key=True, index=True)
    entity_id = Column(String, nullable=False, index=True)  # Completed chore/task id (opaque)
    category_id = Column(String, nullable=True)
    completed_at = Column(DateTime, nullable=False, index=True)  # Authoritative for streak bucketing
    due_at = Column(DateTime, nullable=True)  # Used for early completion checks
    created_at = Column(DateTime, default=datetime.now)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    color = Column(String, default="gray")
    created_at = Column(DateTime, default=datetime.now)


class Achievement(Base):
    """Last evaluated state per achievement definition (cache of the event log)"""
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    achievement_id = Column(String, nullable=False, unique=True, index=True)
    progress = Column(Integer, default=0)
    unlocked = Column(Boolean, default=False)  # One-way: never reset to False
    unlocked_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class StreakSnapshot(Base):
    """Cached streak state; the completions table is the source of truth"""
    __tablename__ = "streak_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    current_streak = Column(Integer, default=0)
    longest_streak = Column(Integer, default=0)
    total_completions = Column(Integer, default=0)
    evaluated_at = Column(DateTime, nullable=True)


class PromptLedger(Base):
    __tablename__ = "prompt_ledger"

    id = Column(Integer, primary_key=True, index=True)
    daily_remaining = Column(Integer, nullable=False)  # 0..daily_prompt_quota
    purchased_balance = Column(Integer, default=0)  # Only changed by purchases and consumption
    last_reset_date = Column(Date, nullable=False)  # Local calendar date of last daily reset
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class PromptPurchase(Base):
    __tablename__ = "prompt_purchases"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String, nullable=False, unique=True, index=True)
    product_id = Column(String, nullable=False)
    credits = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.now)


class Settings(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)

    # AI prompt limits
    daily_prompt_quota = Column(Integer, default=DEFAULT_DAILY_PROMPT_QUOTA)

    # Day boundary: IANA timezone name, empty means server local time
    timezone = Column(String, default="")

    # Updated timestamp
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
