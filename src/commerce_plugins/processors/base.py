from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel, Field

from ..capabilities import CapabilityMixin
from ..reconciliation import PaymentSessionStatus


class PaymentProcessorError(Exception):
    """Error reported by a payment vendor, shaped for the platform."""

    def __init__(self, message: str, code: str = "", detail: str = ""):
        super().__init__(message)
        self.message = message
        self.code = code
        self.detail = detail

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.message, "code": self.code, "detail": self.detail}


class OperationNotSupportedError(PaymentProcessorError):
    """Raised when a processor is asked for an operation it does not offer."""

    def __init__(self, processor: str, operation: str):
        super().__init__(
            f"{processor} does not support {operation}",
            code="not_supported",
            detail=operation,
        )
        self.operation = operation


# Platform-side models
class Address(BaseModel):
    first_name: str = ""
    last_name: str = ""
    address_1: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    country_code: str = ""
    phone: Optional[str] = None


class Region(BaseModel):
    currency_code: str


class Cart(BaseModel):
    id: str
    email: Optional[str] = None
    total: int  # minor units
    region: Region
    shipping_address: Address = Field(default_factory=Address)


class CartService(Protocol):
    """The platform's cart store, as seen by a payment processor."""

    def retrieve_with_totals(self, cart_id: str) -> Cart:
        ...


class PaymentProcessorContext(BaseModel):
    resource_id: str  # cart id
    amount: Optional[int] = None
    currency_code: Optional[str] = None
    email: Optional[str] = None
    payment_session_data: Dict[str, Any] = Field(default_factory=dict)
    context: Dict[str, Any] = Field(default_factory=dict)


class AuthorizationResult(BaseModel):
    status: PaymentSessionStatus
    data: Dict[str, Any] = Field(default_factory=dict)


class PaymentProcessorBase(CapabilityMixin, ABC):
    """
    Lifecycle contract between the platform and a payment vendor.
    Implementations translate each call into vendor requests and hold no
    session state of their own; the platform persists whatever they return.
    """

    identifier: str = ""

    OPERATIONS = frozenset({
        "initiate_payment",
        "authorize_payment",
        "get_payment_status",
        "retrieve_payment",
        "update_payment",
        "update_payment_data",
        "capture_payment",
        "refund_payment",
        "cancel_payment",
        "delete_payment",
    })

    @abstractmethod
    def initiate_payment(self, context: PaymentProcessorContext) -> Dict[str, Any]:
        """
        Start a vendor payment for a cart. Returns ``{"session_data": {...}}``.
        """
        raise NotImplementedError

    @abstractmethod
    def authorize_payment(
        self, session_data: Dict[str, Any], context: Dict[str, Any]
    ) -> AuthorizationResult:
        raise NotImplementedError

    @abstractmethod
    def get_payment_status(self, session_data: Dict[str, Any]) -> PaymentSessionStatus:
        raise NotImplementedError

    @abstractmethod
    def retrieve_payment(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def update_payment(self, context: PaymentProcessorContext) -> Optional[Dict[str, Any]]:
        """
        Refresh a payment after the cart changed. None means nothing to update.
        """
        raise NotImplementedError

    def update_payment_data(self, session_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return dict(data)

    @abstractmethod
    def capture_payment(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def refund_payment(self, session_data: Dict[str, Any], refund_amount: int) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def cancel_payment(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def delete_payment(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def not_supported(self, operation: str) -> OperationNotSupportedError:
        return OperationNotSupportedError(self.identifier or type(self).__name__, operation)
