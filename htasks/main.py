from fastapi import FastAPI, Depends, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from typing import List
import logging
import os
from pathlib import Path

from htasks.database import engine, get_db, Base
from htasks import models  # Import all models to register them with Base
from htasks.schemas import (
    CompletionCreate, CompletionResponse, CompletionRecordedResponse,
    ProgressResponse, DayCompletionsResponse, CategoryBreakdownResponse,
    CategoryCreate, CategoryResponse,
    PromptStatusResponse, PurchaseCreate, PurchaseResponse,
    SettingsUpdate, SettingsResponse
)
from htasks.auth import verify_api_key
from htasks.exceptions import (
    InvalidArgumentException, InsufficientBalanceException, CategoryNotFoundException
)
from htasks.services.progress_service import ProgressService
from htasks.services.prompt_service import PromptService
from htasks.services.category_service import CategoryService
from htasks.services.settings_service import SettingsService
from htasks.scheduler import start_scheduler, stop_scheduler, reschedule_midnight_job
from htasks.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, DEFAULT_LOG_FILE,
    DEFAULT_HISTORY_DAYS, MAX_HISTORY_DAYS, CORS_ALLOWED_ORIGINS,
    DEFAULT_TIMEFRAME, ACHIEVEMENT_FILTER_ALL
)

LOG_DIR = os.getenv("HTASKS_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("HTASKS_LOG_FILE", DEFAULT_LOG_FILE)

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()  # Also log to console
    ]
)

logger = logging.getLogger("htasks")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="HTasks API",
    description="Chore streaks, achievements and AI prompt entitlements",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info(f"HTasks API started. Logging to: {log_path}")
    start_scheduler()

# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down HTasks API")
    stop_scheduler()

# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "HTasks API", "status": "active"}


# ===== COMPLETION ENDPOINTS =====

@app.post("/api/completions", response_model=CompletionRecordedResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
def record_completion(completion: CompletionCreate, db: Session = Depends(get_db)):
    """Record a completed chore and re-evaluate streaks and achievements"""
    try:
        return ProgressService(db).record_completion(completion)
    except InvalidArgumentException as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/completions", response_model=List[CompletionResponse], dependencies=[Depends(verify_api_key)])
def get_completions(db: Session = Depends(get_db)):
    """Get the completion log (oldest first)"""
    return ProgressService(db).get_completions()


# ===== PROGRESS ENDPOINTS =====

@app.get("/api/progress", response_model=ProgressResponse, dependencies=[Depends(verify_api_key)])
def get_progress(
    achievement_status: str = Query(ACHIEVEMENT_FILTER_ALL, alias="status"),
    db: Session = Depends(get_db)
):
    """Get current streak and achievement progress (status: all, unlocked or locked)"""
    try:
        return ProgressService(db).get_progress(status=achievement_status)
    except InvalidArgumentException as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/progress/history", response_model=List[DayCompletionsResponse], dependencies=[Depends(verify_api_key)])
def get_progress_history(
    days: int = Query(DEFAULT_HISTORY_DAYS, ge=1, le=MAX_HISTORY_DAYS),
    db: Session = Depends(get_db)
):
    """Get completions per day for the last N days"""
    try:
        return ProgressService(db).get_history(days)
    except InvalidArgumentException as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/progress/categories", response_model=CategoryBreakdownResponse, dependencies=[Depends(verify_api_key)])
def get_category_breakdown(
    timeframe: str = Query(DEFAULT_TIMEFRAME),
    db: Session = Depends(get_db)
):
    """Get completions per category for a time frame (day, week, month or all)"""
    try:
        return ProgressService(db).get_category_breakdown(timeframe)
    except InvalidArgumentException as e:
        raise HTTPException(status_code=400, detail=str(e))


# ===== CATEGORY ENDPOINTS =====

@app.get("/api/categories", response_model=List[CategoryResponse], dependencies=[Depends(verify_api_key)])
def get_categories(db: Session = Depends(get_db)):
    """Get all categories"""
    return CategoryService(db).get_categories()

@app.get("/api/categories/{category_id}", response_model=CategoryResponse, dependencies=[Depends(verify_api_key)])
def get_category(category_id: int, db: Session = Depends(get_db)):
    """Get a specific category"""
    try:
        return CategoryService(db).get_category(category_id)
    except CategoryNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))

@app.post("/api/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    """Create a new category"""
    try:
        return CategoryService(db).create_category(category)
    except InvalidArgumentException as e:
        raise HTTPException(status_code=400, detail=str(e))


# ===== PROMPT ENTITLEMENT ENDPOINTS =====

@app.get("/api/prompts", response_model=PromptStatusResponse, dependencies=[Depends(verify_api_key)])
def get_prompt_status(db: Session = Depends(get_db)):
    """Get remaining AI prompts for today"""
    try:
        return PromptService(db).get_status()
    except InvalidArgumentException as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.post("/api/prompts/consume", response_model=PromptStatusResponse, dependencies=[Depends(verify_api_key)])
def consume_prompt(db: Session = Depends(get_db)):
    """Use one prompt (purchased credits first, then the daily quota)"""
    try:
        return PromptService(db).consume()
    except InsufficientBalanceException as e:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(e))
    except InvalidArgumentException as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.post("/api/prompts/purchases", response_model=PurchaseResponse, dependencies=[Depends(verify_api_key)])
def record_purchase(purchase: PurchaseCreate, db: Session = Depends(get_db)):
    """Credit a purchase verified by the store integration"""
    try:
        return PromptService(db).record_purchase(purchase.transaction_id, purchase.product_id)
    except InvalidArgumentException as e:
        raise HTTPException(status_code=400, detail=str(e))


# ===== SETTINGS ENDPOINTS =====

@app.get("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
def get_settings(db: Session = Depends(get_db)):
    """Get application settings"""
    return SettingsService(db).get()

@app.put("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
def update_settings(settings_update: SettingsUpdate, db: Session = Depends(get_db)):
    """
    Update application settings.

    A timezone change moves the day boundary for new completions and the
    midnight job. Completions already recorded keep their stored local time
    and calendar day.
    """
    settings_service = SettingsService(db)
    try:
        settings = settings_service.update(settings_update)
    except InvalidArgumentException as e:
        raise HTTPException(status_code=400, detail=str(e))

    if settings_update.timezone is not None:
        reschedule_midnight_job(settings_service.get_timezone())
    return settings


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("htasks.main:app", host="0.0.0.0", port=8000, reload=False)
