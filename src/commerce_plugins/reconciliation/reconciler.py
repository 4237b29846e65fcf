"""Derive platform payment-session status from a vendor payment intent."""

from typing import FrozenSet, List, Optional

from .models import (
    DiscrepancyType,
    OrderExpectation,
    PaymentIntentSnapshot,
    PaymentSessionStatus,
)

SUCCEEDED = "succeeded"

# Vendor statuses where the customer or the vendor still has work to do
PENDING_STATUSES: FrozenSet[str] = frozenset({
    "awaiting_next_action",
    "awaiting_payment_method",
    "processing",
})


def find_discrepancies(
    snapshot: PaymentIntentSnapshot,
    expectation: OrderExpectation,
) -> List[DiscrepancyType]:
    """List the ways a payment intent disagrees with the expected charge.

    Amounts must be exactly equal; currencies are compared case-insensitively.

    Args:
        snapshot: Payment intent as reported by the vendor.
        expectation: Order total and currency owned by the platform.

    Returns:
        Empty list when the intent pays exactly for the order.
    """
    discrepancies: List[DiscrepancyType] = []
    if snapshot.amount != expectation.total:
        discrepancies.append(DiscrepancyType.AMOUNT_MISMATCH)
    if snapshot.currency.lower() != expectation.currency_code.lower():
        discrepancies.append(DiscrepancyType.CURRENCY_MISMATCH)
    return discrepancies


def classify(
    snapshot: Optional[PaymentIntentSnapshot],
    expectation: OrderExpectation,
) -> PaymentSessionStatus:
    """Classify a payment intent against the order it should pay for.

    A ``succeeded`` intent is only AUTHORIZED when it matches the expected
    amount and currency; a mismatched one is an ERROR so the order is never
    finalized. Pending-like statuses are PENDING regardless of amount, and a
    missing snapshot is an ERROR.

    Args:
        snapshot: Payment intent as reported by the vendor, or None.
        expectation: Order total and currency owned by the platform.

    Returns:
        The platform payment-session status.
    """
    if snapshot is None:
        return PaymentSessionStatus.ERROR
    if snapshot.status == SUCCEEDED:
        if not find_discrepancies(snapshot, expectation):
            return PaymentSessionStatus.AUTHORIZED
        return PaymentSessionStatus.ERROR
    return to_session_status(snapshot)


def to_session_status(snapshot: Optional[PaymentIntentSnapshot]) -> PaymentSessionStatus:
    """Map a payment intent to a session status from its vendor status alone."""
    if snapshot is None:
        return PaymentSessionStatus.ERROR
    if snapshot.status == SUCCEEDED:
        return PaymentSessionStatus.AUTHORIZED
    if snapshot.status in PENDING_STATUSES:
        return PaymentSessionStatus.PENDING
    return PaymentSessionStatus.ERROR
