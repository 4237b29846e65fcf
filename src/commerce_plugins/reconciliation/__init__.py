"""Payment status reconciliation.

Maps a vendor payment intent, plus the amount and currency the platform
expects, onto the platform's payment-session status.
"""

from .models import (
    DiscrepancyType,
    OrderExpectation,
    PaymentIntentSnapshot,
    PaymentSessionStatus,
)
from .reconciler import (
    PENDING_STATUSES,
    SUCCEEDED,
    classify,
    find_discrepancies,
    to_session_status,
)

__all__ = [
    # Models
    "DiscrepancyType",
    "OrderExpectation",
    "PaymentIntentSnapshot",
    "PaymentSessionStatus",
    # Reconciliation
    "PENDING_STATUSES",
    "SUCCEEDED",
    "classify",
    "find_discrepancies",
    "to_session_status",
]
