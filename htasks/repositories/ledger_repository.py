"""
Ledger repository - Data access layer for prompt entitlement models.
"""
from typing import Optional
from sqlalchemy.orm import Session

from htasks.models import PromptLedger, PromptPurchase


class PromptLedgerRepository:
    """Repository for PromptLedger data access"""

    @staticmethod
    def get(db: Session) -> Optional[PromptLedger]:
        return db.query(PromptLedger).first()

    @staticmethod
    def create(db: Session, ledger: PromptLedger) -> PromptLedger:
        db.add(ledger)
        db.commit()
        db.refresh(ledger)
        return ledger

    @staticmethod
    def update(db: Session, ledger: PromptLedger) -> PromptLedger:
        db.commit()
        db.refresh(ledger)
        return ledger


class PromptPurchaseRepository:
    """Repository for PromptPurchase data access"""

    @staticmethod
    def get_by_transaction_id(db: Session, transaction_id: str) -> Optional[PromptPurchase]:
        return db.query(PromptPurchase).filter(
            PromptPurchase.transaction_id == transaction_id
        ).first()

    @staticmethod
    def add(db: Session, purchase: PromptPurchase) -> None:
        """Stage a purchase; committed together with the ledger update"""
        db.add(purchase)
