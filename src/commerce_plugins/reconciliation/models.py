"""Models for payment status reconciliation."""

import enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class PaymentSessionStatus(str, enum.Enum):
    """Platform payment-session states this adapter can report."""
    AUTHORIZED = "authorized"
    PENDING = "pending"
    ERROR = "error"


class DiscrepancyType(str, enum.Enum):
    """Ways a vendor payment intent can disagree with the order it pays for."""
    AMOUNT_MISMATCH = "amount_mismatch"
    CURRENCY_MISMATCH = "currency_mismatch"


class PaymentIntentSnapshot(BaseModel):
    """Vendor-reported view of a single payment attempt."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Payment intent ID assigned by the vendor")
    amount: int = Field(..., description="Amount in minor units")
    currency: str = Field(..., description="Vendor currency code, any case")
    status: str = Field(..., description="Vendor payment intent status")

    @classmethod
    def from_api(cls, payload: Optional[Dict[str, Any]]) -> Optional["PaymentIntentSnapshot"]:
        """Build a snapshot from a ``payment_intents/{id}`` response body.

        Returns None when the payload carries no usable payment intent:
        no ``data`` object, no ``id``, or attributes that fail validation.
        """
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict) or not data.get("id"):
            return None
        attributes = data.get("attributes")
        if not isinstance(attributes, dict):
            return None
        try:
            return cls(
                id=data["id"],
                amount=attributes.get("amount"),
                currency=attributes.get("currency"),
                status=attributes.get("status"),
            )
        except ValidationError:
            return None


class OrderExpectation(BaseModel):
    """The charge the platform expects for an order."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(..., description="Order total in minor units")
    currency_code: str = Field(..., description="Platform currency code, lower-cased")

    @field_validator("currency_code")
    @classmethod
    def _lower_currency(cls, value: str) -> str:
        return value.lower()
