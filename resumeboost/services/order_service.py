"""Checkout order reconciliation.

The client computes the amount it expects to pay; the server recomputes it
from the catalog, coupon, wallet and add-ons, refuses any mismatch, records a
pending transaction and only then asks the payment gateway for an order.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from config.settings import CURRENCY
from resumeboost.records import OrderHandle, PaymentTransaction
from resumeboost.schemas import OrderRequest
from resumeboost.services.catalog import (
    ADDON_ONLY_PLAN_ID,
    WEBINAR_PLAN_ID,
    Catalog,
    PlanConfig,
    addon_only_plan,
    load_catalog,
    webinar_plan,
)
from resumeboost.services.errors import (
    AmountMismatch,
    CouponAlreadyUsed,
    CouponExhausted,
    InvalidCoupon,
    InvalidPlan,
    UpstreamError,
    ValidationError,
)
from resumeboost.services.payment_gateway import RazorpayGateway
from resumeboost.services.transaction_repository import TransactionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceBreakdown:
    original_amount: int
    discount_amount: int
    final_amount: int
    coupon_code: Optional[str] = None


def compute_final_amount(original: int, discount: int, wallet: int, add_ons: int) -> int:
    """``max(0, original - discount - wallet) + add_ons``, all minor units."""
    return max(0, original - discount - wallet) + add_ons


def normalize_coupon(code: str) -> str:
    return code.strip().lower()


class OrderService:
    """Validate a purchase, persist it as pending and open a gateway order."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        transactions: Optional[TransactionRepository] = None,
        gateway: Optional[RazorpayGateway] = None,
        currency: str = CURRENCY,
    ) -> None:
        self._catalog = catalog or load_catalog()
        self._transactions = transactions or TransactionRepository()
        self._gateway = gateway or RazorpayGateway()
        self._currency = currency

    def create_order(self, request: OrderRequest, user_id: str) -> OrderHandle:
        logger.info(
            "Order requested by %s: plan=%s coupon=%s amount=%s webinar=%s",
            user_id,
            request.planId,
            request.couponCode,
            request.amount,
            request.is_webinar,
        )

        if request.is_webinar:
            self._validate_webinar(request)
        self._validate_add_ons(request)

        plan = self._resolve_plan(request)
        breakdown = self._price(request, plan, user_id)

        if not request.is_webinar and breakdown.final_amount != request.amount:
            logger.error(
                "Price mismatch detected! Backend calculated: %s, client sent: %s",
                breakdown.final_amount,
                request.amount,
            )
            raise AmountMismatch(
                "Price mismatch detected. Please try again.",
                details={
                    "backendCalculated": breakdown.final_amount,
                    "frontendSent": request.amount,
                    "difference": abs(breakdown.final_amount - request.amount),
                },
            )

        transaction = self._persist(request, plan, breakdown, user_id)
        logger.info("Pending transaction created with ID: %s", transaction.id)

        try:
            order = self._gateway.create_order(
                breakdown.final_amount,
                self._currency,
                receipt=f"txn_{transaction.id}",
                notes=self._order_notes(request, plan, breakdown, transaction),
            )
        except UpstreamError:
            logger.error("Gateway order failed; marking transaction %s as failed", transaction.id)
            self._mark_failed(transaction.id)
            raise
        except Exception as error:
            logger.error(f"Unexpected gateway error for transaction {transaction.id}: {error}")
            self._mark_failed(transaction.id)
            raise UpstreamError("Failed to create payment order") from error

        try:
            self._transactions.attach_gateway_order(transaction.id, order["id"])
        except SQLAlchemyError as error:
            # The order notes still carry the transaction id for the webhook.
            logger.error(f"Could not record gateway order {order['id']} on {transaction.id}: {error}")
        logger.info("Razorpay order created successfully: %s", order["id"])

        return OrderHandle(
            order_id=order["id"],
            amount=breakdown.final_amount,
            currency=self._currency,
            transaction_id=transaction.id,
            key_id=self._gateway.key_id,
        )

    @staticmethod
    def _validate_webinar(request: OrderRequest) -> None:
        if request.amount <= 0:
            raise ValidationError(
                "Invalid payment amount for webinar. Amount must be greater than 0.",
                details={"receivedAmount": request.amount},
            )
        metadata = request.metadata
        if not metadata.webinarId or not metadata.registrationId:
            raise ValidationError(
                "Missing required webinar information",
                details={"required": ["webinarId", "registrationId"]},
            )

    def _validate_add_ons(self, request: OrderRequest) -> None:
        unknown = sorted(set(request.selectedAddOns) - set(self._catalog.add_ons))
        if unknown:
            raise ValidationError("Unknown add-on selected", details={"addOns": unknown})

    def _resolve_plan(self, request: OrderRequest) -> PlanConfig:
        if request.is_webinar:
            return webinar_plan(request.metadata.webinarTitle)
        if not request.planId or request.planId == ADDON_ONLY_PLAN_ID:
            return addon_only_plan()
        plan = self._catalog.get_plan(request.planId)
        if plan is None:
            logger.error("Invalid plan ID: %s", request.planId)
            raise InvalidPlan("Invalid plan selected")
        return plan

    def _price(self, request: OrderRequest, plan: PlanConfig, user_id: str) -> PriceBreakdown:
        if request.is_webinar:
            return PriceBreakdown(request.amount, 0, request.amount)

        original = plan.price_minor
        discount, coupon_code = 0, None
        if request.couponCode and request.couponCode.strip():
            discount, coupon_code = self._apply_coupon(request.couponCode, plan, original, user_id)

        final = compute_final_amount(
            original,
            discount,
            request.walletDeduction or 0,
            request.addOnsTotal or 0,
        )
        return PriceBreakdown(original, discount, final, coupon_code)

    def _apply_coupon(
        self, raw_code: str, plan: PlanConfig, original: int, user_id: str
    ) -> Tuple[int, str]:
        code = normalize_coupon(raw_code)

        used = self._count(self._transactions.count_user_coupon_usage, user_id, code)
        if used > 0:
            logger.info('Coupon "%s" already used by user %s', code, user_id)
            raise CouponAlreadyUsed(f'Coupon "{code}" has already been used by this account.')

        rule = self._catalog.get_coupon(code)
        if rule is None or not rule.applies_to(plan.id):
            raise InvalidCoupon("Invalid coupon code or not applicable to selected plan.")

        if rule.usage_cap is not None:
            redemptions = self._count(self._transactions.count_coupon_usage, code)
            if redemptions >= rule.usage_cap:
                raise CouponExhausted(f'Coupon "{code}" has reached its usage limit.')

        discount = rule.discount_for(original)
        logger.info(
            "Coupon %s applied to plan %s. Original: %s, Discount: %s",
            code,
            plan.id,
            original,
            discount,
        )
        return discount, code

    @staticmethod
    def _count(query, *args) -> int:
        try:
            return query(*args)
        except SQLAlchemyError as error:
            logger.error(f"Error checking coupon usage: {error}")
            raise UpstreamError("Failed to verify coupon usage. Please try again.") from error

    @staticmethod
    def _purchase_type(request: OrderRequest, plan: PlanConfig) -> str:
        if request.is_webinar:
            return "webinar"
        if plan.id == ADDON_ONLY_PLAN_ID:
            return "addon_only"
        if request.selectedAddOns:
            return "plan_with_addons"
        return "plan"

    def _persist(
        self, request: OrderRequest, plan: PlanConfig, breakdown: PriceBreakdown, user_id: str
    ) -> PaymentTransaction:
        metadata = None
        if request.is_webinar:
            metadata = {
                "type": "webinar",
                "webinarId": request.metadata.webinarId,
                "registrationId": request.metadata.registrationId,
                "webinarTitle": request.metadata.webinarTitle,
            }

        catalog_plan = plan.id not in (ADDON_ONLY_PLAN_ID, WEBINAR_PLAN_ID)
        try:
            return self._transactions.create_pending(
                user_id=user_id,
                plan_id=plan.id if catalog_plan else None,
                amount=breakdown.original_amount,
                currency=self._currency,
                coupon_code=breakdown.coupon_code,
                discount_amount=breakdown.discount_amount,
                final_amount=breakdown.final_amount,
                purchase_type=self._purchase_type(request, plan),
                metadata=metadata,
            )
        except IntegrityError as error:
            if breakdown.coupon_code:
                # Lost the race against a concurrent checkout with the same coupon.
                raise CouponAlreadyUsed(
                    f'Coupon "{breakdown.coupon_code}" has already been used by this account.'
                ) from error
            logger.error(f"Error inserting pending transaction: {error}")
            raise UpstreamError("Failed to initiate payment transaction") from error
        except SQLAlchemyError as error:
            logger.error(f"Error inserting pending transaction: {error}")
            raise UpstreamError("Failed to initiate payment transaction") from error

    def _mark_failed(self, transaction_id: str) -> None:
        try:
            self._transactions.mark_failed(transaction_id)
        except SQLAlchemyError as error:
            logger.error(f"Could not mark transaction {transaction_id} as failed: {error}")
            raise UpstreamError("Failed to create payment order") from error

    def _order_notes(
        self,
        request: OrderRequest,
        plan: PlanConfig,
        breakdown: PriceBreakdown,
        transaction: PaymentTransaction,
    ) -> Dict[str, Any]:
        metadata = request.metadata
        return {
            "planId": request.planId or plan.id,
            "planName": plan.name,
            "originalAmount": breakdown.original_amount,
            "couponCode": breakdown.coupon_code,
            "discountAmount": breakdown.discount_amount,
            "walletDeduction": 0 if request.is_webinar else request.walletDeduction or 0,
            "addOnsTotal": 0 if request.is_webinar else request.addOnsTotal or 0,
            "transactionId": transaction.id,
            "selectedAddOns": json.dumps(request.selectedAddOns, sort_keys=True),
            "paymentType": "webinar" if request.is_webinar else "subscription",
            "webinarId": metadata.webinarId if metadata else None,
            "registrationId": metadata.registrationId if metadata else None,
            "webinarTitle": metadata.webinarTitle if metadata else None,
        }


order_service = OrderService()
