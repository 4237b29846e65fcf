"""Payment processors."""

from .base import (
    Address,
    AuthorizationResult,
    Cart,
    CartService,
    OperationNotSupportedError,
    PaymentProcessorBase,
    PaymentProcessorContext,
    PaymentProcessorError,
    Region,
)
from .paymongo import PaymongoProcessor

__all__ = [
    # Contract and models
    "PaymentProcessorBase",
    "PaymentProcessorContext",
    "AuthorizationResult",
    "Address",
    "Cart",
    "CartService",
    "Region",
    # Errors
    "PaymentProcessorError",
    "OperationNotSupportedError",
    # Processors
    "PaymongoProcessor",
]
