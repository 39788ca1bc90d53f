from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import List, Optional


# Completion schemas
class CompletionCreate(BaseModel):
    entity_id: str = Field(..., min_length=1, max_length=200)
    category_id: Optional[str] = Field(None, max_length=200)
    completed_at: Optional[datetime] = None  # Defaults to now
    due_at: Optional[datetime] = None

class CompletionResponse(BaseModel):
    id: int
    entity_id: str
    category_id: Optional[str] = None
    completed_at: datetime
    due_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Progress schemas
class StreakResponse(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0
    total_completions: int = 0
    message: str

class AchievementResponse(BaseModel):
    id: str
    kind: str
    name: str
    description: str
    required_progress: int
    progress: int = 0
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None

class ProgressResponse(BaseModel):
    streak: StreakResponse
    achievements: List[AchievementResponse]
    newly_unlocked: List[str] = []

class CompletionRecordedResponse(ProgressResponse):
    completion: CompletionResponse

class DayCompletionsResponse(BaseModel):
    day: date
    completions: int

class CategoryCompletionsResponse(BaseModel):
    category_id: Optional[str] = None  # None = uncategorized
    name: Optional[str] = None  # Set when category_id matches a stored category
    completions: int

class CategoryBreakdownResponse(BaseModel):
    timeframe: str
    since: Optional[datetime] = None  # None for "all"
    total: int
    categories: List[CategoryCompletionsResponse]


# Category schemas
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default="gray", max_length=30)

class CategoryResponse(BaseModel):
    id: int
    name: str
    color: str
    created_at: datetime

    class Config:
        from_attributes = True


# Prompt entitlement schemas
class PromptStatusResponse(BaseModel):
    remaining: int
    daily_remaining: int
    daily_quota: int
    purchased_balance: int
    can_consume: bool
    last_reset_date: date

class PurchaseCreate(BaseModel):
    transaction_id: str = Field(..., min_length=1, max_length=200)
    product_id: str = Field(..., min_length=1, max_length=200)

class PurchaseResponse(BaseModel):
    transaction_id: str
    product_id: str
    credits: int
    purchased_balance: int
    duplicate: bool = False  # Transaction was already recorded


# Settings schemas
class SettingsUpdate(BaseModel):
    daily_prompt_quota: Optional[int] = Field(None, ge=0, le=1000)
    timezone: Optional[str] = Field(None, max_length=64)

class SettingsResponse(BaseModel):
    id: int
    daily_prompt_quota: int
    timezone: str = ""
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
