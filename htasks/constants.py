"""
Application-wide constants and defaults.
"""
import os

# Environment
DEFAULT_DATABASE_URL = "sqlite:///./htasks.db"
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/htasks"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_LOG_FILE = "app.log"

API_KEY_HEADER = "X-API-Key"
DEFAULT_API_KEY = "change-me"

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "HTASKS_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]

# AI prompt entitlement
DEFAULT_DAILY_PROMPT_QUOTA = 15
PROMPT_PRODUCT_CREDITS = {
    "com.htasks.aiprompts.30": 30,
}

# Achievement kinds
ACHIEVEMENT_FIRST_COMPLETION = "first_completion"
ACHIEVEMENT_VOLUME_THRESHOLD = "volume_threshold"
ACHIEVEMENT_CATEGORY_DIVERSITY = "category_diversity"
ACHIEVEMENT_STREAK_THRESHOLD = "streak_threshold"
ACHIEVEMENT_EARLY_COMPLETION = "early_completion"
ACHIEVEMENT_CATEGORY_COUNT = "category_count"
ACHIEVEMENT_CONSISTENCY_STREAK = "consistency_streak"

# Default catalog thresholds
TASK_MASTER_REQUIRED = 10
CATEGORY_EXPLORER_REQUIRED = 3
STREAK_MASTER_REQUIRED = 30
ORGANIZER_REQUIRED = 5
CONSISTENCY_REQUIRED = 7

# Streak message tiers (upper bounds, exclusive)
STREAK_TIER_MOMENTUM = 3
STREAK_TIER_GREAT = 7
STREAK_TIER_IMPRESSIVE = 14

# History endpoint
DEFAULT_HISTORY_DAYS = 30
MAX_HISTORY_DAYS = 365

# Analytics time frames
TIMEFRAME_DAY = "day"
TIMEFRAME_WEEK = "week"
TIMEFRAME_MONTH = "month"
TIMEFRAME_ALL = "all"
TIMEFRAMES = (TIMEFRAME_DAY, TIMEFRAME_WEEK, TIMEFRAME_MONTH, TIMEFRAME_ALL)
DEFAULT_TIMEFRAME = TIMEFRAME_WEEK

# Achievement list filters
ACHIEVEMENT_FILTER_ALL = "all"
ACHIEVEMENT_FILTER_UNLOCKED = "unlocked"
ACHIEVEMENT_FILTER_LOCKED = "locked"
ACHIEVEMENT_FILTERS = (ACHIEVEMENT_FILTER_ALL, ACHIEVEMENT_FILTER_UNLOCKED, ACHIEVEMENT_FILTER_LOCKED)
