"""Razorpay order API client."""

import logging
from typing import Any, Dict, Optional

import requests

from config.settings import (
    PAYMENT_GATEWAY_TIMEOUT,
    RAZORPAY_API_URL,
    RAZORPAY_KEY_ID,
    RAZORPAY_KEY_SECRET,
)
from resumeboost.services.errors import UpstreamError

logger = logging.getLogger(__name__)


class RazorpayGateway:
    """Create payment orders with Basic auth over the static key pair.

    Amounts are always minor units (paise). Every failure, including timeouts
    and missing credentials, is reported as ``UpstreamError``.
    """

    def __init__(
        self,
        key_id: Optional[str] = RAZORPAY_KEY_ID,
        key_secret: Optional[str] = RAZORPAY_KEY_SECRET,
        api_url: str = RAZORPAY_API_URL,
        timeout: float = PAYMENT_GATEWAY_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.key_id = key_id or ""
        self._key_secret = key_secret or ""
        self._api_url = api_url
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.key_id and self._key_secret)

    def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not self.is_configured:
            logger.error("Razorpay credentials not configured")
            raise UpstreamError("Payment gateway credentials not configured")

        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            # Razorpay only accepts string note values.
            "notes": {key: "" if value is None else str(value) for key, value in (notes or {}).items()},
        }
        logger.info("Creating Razorpay order: amount=%s currency=%s receipt=%s", amount, currency, receipt)

        try:
            response = self._session.post(
                self._api_url,
                auth=(self.key_id, self._key_secret),
                json=payload,
                timeout=self._timeout,
            )
        except requests.RequestException as error:
            logger.error(f"Razorpay request failed: {error}")
            raise UpstreamError(f"Failed to reach payment gateway: {error}") from error

        logger.info("Razorpay API response status: %s", response.status_code)
        if response.status_code not in (200, 201):
            logger.error("Razorpay API error: %s", response.text)
            raise UpstreamError(f"Failed to create payment order with Razorpay: {response.text}")

        try:
            order = response.json()
        except ValueError as error:
            raise UpstreamError("Payment gateway returned an invalid response") from error

        if not isinstance(order, dict):
            raise UpstreamError("Payment gateway returned an invalid response")
        if not order.get("id"):
            raise UpstreamError("Payment gateway response did not include an order id")
        return order
