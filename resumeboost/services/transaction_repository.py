"""Database repository for payment transactions."""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from sqlalchemy import func, select, update

from config.settings import DATABASE_URL
from resumeboost.db.base import SessionRepository
from resumeboost.db.models import ACTIVE_TRANSACTION_STATUSES, PaymentTransactionModel
from resumeboost.records import PaymentTransaction


class TransactionRepository(SessionRepository):
    """Persistence for checkout attempts and coupon redemption counts."""

    def __init__(self, database_url: str = DATABASE_URL) -> None:
        super().__init__(database_url)

    def create_pending(
        self,
        *,
        user_id: str,
        plan_id: Optional[str],
        amount: int,
        currency: str,
        coupon_code: Optional[str],
        discount_amount: int,
        final_amount: int,
        purchase_type: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> PaymentTransaction:
        model = PaymentTransactionModel(
            id=uuid.uuid4().hex,
            user_id=user_id,
            plan_id=plan_id,
            status="pending",
            amount=amount,
            currency=currency,
            coupon_code=coupon_code,
            discount_amount=discount_amount,
            final_amount=final_amount,
            purchase_type=purchase_type,
            metadata_json=metadata,
        )
        with self.session_scope() as session:
            session.add(model)
            session.flush()
            return self._model_to_transaction(model)

    def set_status(self, transaction_id: str, status: str) -> None:
        stmt = (
            update(PaymentTransactionModel)
            .where(PaymentTransactionModel.id == transaction_id)
            .values(status=status)
        )
        with self.session_scope() as session:
            session.execute(stmt)

    def mark_failed(self, transaction_id: str) -> None:
        self.set_status(transaction_id, "failed")

    def attach_gateway_order(self, transaction_id: str, gateway_order_id: str) -> None:
        stmt = (
            update(PaymentTransactionModel)
            .where(PaymentTransactionModel.id == transaction_id)
            .values(gateway_order_id=gateway_order_id)
        )
        with self.session_scope() as session:
            session.execute(stmt)

    def get_by_id(self, transaction_id: str) -> Optional[PaymentTransaction]:
        with self.session_scope() as session:
            model = session.get(PaymentTransactionModel, transaction_id)
            return self._model_to_transaction(model)

    def count_user_coupon_usage(self, user_id: str, coupon_code: str) -> int:
        stmt = (
            select(func.count(PaymentTransactionModel.id))
            .where(PaymentTransactionModel.user_id == user_id)
            .where(func.lower(PaymentTransactionModel.coupon_code) == coupon_code.lower())
            .where(PaymentTransactionModel.status.in_(ACTIVE_TRANSACTION_STATUSES))
        )
        with self.session_scope() as session:
            return session.scalar(stmt) or 0

    def count_coupon_usage(self, coupon_code: str) -> int:
        stmt = (
            select(func.count(PaymentTransactionModel.id))
            .where(PaymentTransactionModel.coupon_code == coupon_code)
            .where(PaymentTransactionModel.status.in_(ACTIVE_TRANSACTION_STATUSES))
        )
        with self.session_scope() as session:
            return session.scalar(stmt) or 0

    @staticmethod
    def _model_to_transaction(model: Optional[PaymentTransactionModel]) -> Optional[PaymentTransaction]:
        if model is None:
            return None
        return PaymentTransaction(
            id=model.id,
            user_id=model.user_id,
            status=model.status,
            amount=model.amount,
            currency=model.currency,
            final_amount=model.final_amount,
            purchase_type=model.purchase_type,
            plan_id=model.plan_id,
            coupon_code=model.coupon_code,
            discount_amount=model.discount_amount,
            gateway_order_id=model.gateway_order_id,
            metadata=model.metadata_json,
            created_at=model.created_at,
        )
