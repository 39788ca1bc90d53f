"""
Prompt entitlement service.
Loads the ledger from storage, applies one operation and saves it back.
"""
import logging
from datetime import date
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from htasks.models import PromptLedger, PromptPurchase
from htasks.repositories.ledger_repository import (
    PromptLedgerRepository, PromptPurchaseRepository
)
from htasks.services.date_service import DateService
from htasks.services.ledger_service import EntitlementLedger
from htasks.services.settings_service import SettingsService
from htasks.exceptions import (
    InsufficientBalanceException, InvalidArgumentException, UnknownProductException
)
from htasks.constants import PROMPT_PRODUCT_CREDITS

logger = logging.getLogger("htasks.prompts")


class PromptService:
    """Service for AI prompt quota and purchased credits"""

    def __init__(self, db: Session):
        self.db = db
        self.ledger_repo = PromptLedgerRepository()
        self.purchase_repo = PromptPurchaseRepository()
        self.settings_service = SettingsService(db)

    def _today(self, today: Optional[date] = None) -> date:
        if today is not None:
            return today
        return DateService.today(self.settings_service.get_timezone())

    def _load(self, today: date) -> Tuple[EntitlementLedger, PromptLedger]:
        """Load the ledger, creating it with a full quota on first use"""
        quota = self.settings_service.get().daily_prompt_quota
        record = self.ledger_repo.get(self.db)

        if record is None:
            ledger = EntitlementLedger.open(quota, today)
            record = self.ledger_repo.create(self.db, PromptLedger(
                daily_remaining=ledger.daily_remaining,
                purchased_balance=ledger.purchased_balance,
                last_reset_date=ledger.last_reset_date
            ))
            return ledger, record

        ledger = EntitlementLedger(
            daily_quota=quota,
            daily_remaining=record.daily_remaining,
            purchased_balance=record.purchased_balance or 0,
            last_reset_date=record.last_reset_date
        )
        return ledger, record

    def _save(self, ledger: EntitlementLedger, record: PromptLedger) -> None:
        record.daily_remaining = ledger.daily_remaining
        record.purchased_balance = ledger.purchased_balance
        record.last_reset_date = ledger.last_reset_date
        self.ledger_repo.update(self.db, record)

    @staticmethod
    def _status(ledger: EntitlementLedger, today: date) -> dict:
        remaining = ledger.remaining(today)
        return {
            "remaining": remaining,
            "daily_remaining": ledger.daily_remaining,
            "daily_quota": ledger.daily_quota,
            "purchased_balance": ledger.purchased_balance,
            "can_consume": remaining > 0,
            "last_reset_date": ledger.last_reset_date
        }

    def get_status(self, today: Optional[date] = None) -> dict:
        """Get remaining prompts (applies a pending daily reset)"""
        today = self._today(today)
        ledger, record = self._load(today)
        status = self._status(ledger, today)
        self._save(ledger, record)
        return status

    def remaining(self, today: Optional[date] = None) -> int:
        return self.get_status(today)["remaining"]

    def can_consume(self, today: Optional[date] = None) -> bool:
        return self.get_status(today)["can_consume"]

    def consume(self, today: Optional[date] = None) -> dict:
        """
        Use one prompt before dispatching an AI request.

        Returns:
            Ledger status after consumption

        Raises:
            InsufficientBalanceException: If no prompts are left
        """
        today = self._today(today)
        ledger, record = self._load(today)

        try:
            ledger.consume(today)
        except InsufficientBalanceException:
            # Persist a reset that may have happened before the failure
            self._save(ledger, record)
            logger.info(f"Prompt denied on {today}: quota and credits exhausted")
            raise

        self._save(ledger, record)
        return self._status(ledger, today)

    def reset_daily(self, today: Optional[date] = None) -> bool:
        """Apply the daily reset if the calendar date changed"""
        today = self._today(today)
        ledger, record = self._load(today)
        reset = ledger.reset_daily(today)
        if reset:
            self._save(ledger, record)
            logger.info(f"Daily prompt quota reset for {today}")
        return reset

    def add_purchased(self, count: int, today: Optional[date] = None) -> int:
        """
        Add purchased credits.

        Returns:
            New purchased balance
        """
        today = self._today(today)
        ledger, record = self._load(today)
        balance = ledger.add_purchased(count)
        self._save(ledger, record)
        return balance

    def record_purchase(
        self,
        transaction_id: str,
        product_id: str,
        today: Optional[date] = None
    ) -> dict:
        """
        Credit a verified store transaction.

        Each transaction is credited once; repeating it is a no-op.

        Raises:
            InvalidArgumentException: If the transaction id is empty
            UnknownProductException: If the product grants no credits
        """
        if not transaction_id or not transaction_id.strip():
            raise InvalidArgumentException("transaction_id", "must not be empty")

        credits = PROMPT_PRODUCT_CREDITS.get(product_id)
        if credits is None:
            raise UnknownProductException(product_id)

        today = self._today(today)
        ledger, record = self._load(today)

        existing = self.purchase_repo.get_by_transaction_id(self.db, transaction_id)
        if existing:
            logger.info(f"Purchase {transaction_id} already credited, skipping")
            return {
                "transaction_id": transaction_id,
                "product_id": existing.product_id,
                "credits": existing.credits,
                "purchased_balance": ledger.purchased_balance,
                "duplicate": True
            }

        ledger.add_purchased(credits)
        self.purchase_repo.add(self.db, PromptPurchase(
            transaction_id=transaction_id,
            product_id=product_id,
            credits=credits
        ))
        self._save(ledger, record)
        logger.info(f"Credited {credits} prompts for purchase {transaction_id}")

        return {
            "transaction_id": transaction_id,
            "product_id": product_id,
            "credits": credits,
            "purchased_balance": ledger.purchased_balance,
            "duplicate": False
        }
