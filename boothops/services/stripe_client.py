"""
Stripe payment intents over the REST API
Each tenant brings its own secret key, so calls take the key explicitly
"""

import logging
from typing import Any, Optional

import httpx

from ..config import STRIPE_API_URL

logger = logging.getLogger(__name__)


class StripeError(Exception):
    """Raised when Stripe rejects a request or cannot be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("error", {}).get("message") or response.text
    except ValueError:
        return response.text


async def _request(method: str, path: str, secret_key: str, data: Optional[dict] = None) -> dict[str, Any]:
    try:
        async with httpx.AsyncClient(timeout=30.0) as http_client:
            response = await http_client.request(
                method,
                f"{STRIPE_API_URL}{path}",
                data=data,
                auth=(secret_key, ""),
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ Stripe request {method} {path} failed: {e}")
        raise StripeError("Payment processor is unavailable") from e

    if response.status_code >= 400:
        message = _error_message(response)
        logger.error(f"❌ Stripe {method} {path} returned {response.status_code}: {message}")
        raise StripeError(message, response.status_code)
    return response.json()


async def create_payment_intent(
    secret_key: str, amount: float, metadata: dict[str, str], currency: str = "usd"
) -> dict[str, Any]:
    """Create a PaymentIntent for `amount` dollars with automatic payment methods"""
    data = {
        "amount": str(to_cents(amount)),
        "currency": currency,
        "automatic_payment_methods[enabled]": "true",
    }
    for key, value in metadata.items():
        data[f"metadata[{key}]"] = str(value)

    intent = await _request("POST", "/payment_intents", secret_key, data)
    logger.info(f"💳 Created payment intent {intent.get('id')} for {amount:.2f} {currency}")
    return intent


async def retrieve_payment_intent(secret_key: str, payment_intent_id: str) -> dict[str, Any]:
    return await _request("GET", f"/payment_intents/{payment_intent_id}", secret_key)
