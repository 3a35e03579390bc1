"""Action catalogs: the labels an action search backend ranks."""
from __future__ import annotations

from pathlib import Path

DEFAULT_ACTIONS: tuple[str, ...] = (
    # Refunds & returns
    "process refund",
    "request refund",
    "cancel refund",
    "refund status check",
    "initiate return",
    "return item",
    "exchange product",
    # Purchases & orders
    "purchase item",
    "buy product",
    "place order",
    "cancel order",
    "modify order",
    "track order",
    "order status",
    "reorder item",
    "add to cart",
    "remove from cart",
    "checkout",
    "apply discount code",
    "apply coupon",
    # Account
    "create account",
    "delete account",
    "update profile",
    "change password",
    "reset password",
    "verify email",
    "update email",
    "update phone number",
    "enable two-factor authentication",
    "disable two-factor authentication",
    "view account details",
    "manage preferences",
    # Payment
    "add payment method",
    "remove payment method",
    "update billing address",
    "view payment history",
    "process payment",
    "payment failed retry",
    "set default payment",
    # Subscription
    "subscribe to plan",
    "cancel subscription",
    "upgrade subscription",
    "downgrade subscription",
    "pause subscription",
    "resume subscription",
    "view subscription details",
    # Support
    "contact support",
    "open support ticket",
    "close support ticket",
    "escalate issue",
    "request callback",
    "live chat",
    "submit feedback",
    "report bug",
    "report issue",
    # Shipping
    "update shipping address",
    "track shipment",
    "change delivery date",
    "request express shipping",
    "delivery instructions",
    # Notifications
    "enable notifications",
    "disable notifications",
    "manage notification preferences",
    "unsubscribe from emails",
    "subscribe to newsletter",
    # Products
    "view product details",
    "compare products",
    "add to wishlist",
    "remove from wishlist",
    "write review",
    "read reviews",
    "check availability",
    "notify when available",
    "view recommendations",
)


def load_catalog(path: Path | str) -> list[str]:
    """Read one action label per line.

    Blank lines and ``#`` comments are skipped; duplicates keep their
    first position.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Action catalog not found: {path}"
        raise FileNotFoundError(msg)

    labels: list[str] = []
    seen: set[str] = set()
    for line in path.read_text(encoding="utf-8").splitlines():
        label = line.strip()
        if not label or label.startswith("#") or label in seen:
            continue
        seen.add(label)
        labels.append(label)
    return labels
