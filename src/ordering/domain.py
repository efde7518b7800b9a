"""Ordering bounded context — Carts, Checkout, Orders and Payments.

Handles the per-user shopping cart, the checkout flow that partitions a cart
by store and converts the selected lines into an Order, the order status
lifecycle (admin and store-owner driven), and the payment records that are
linked to orders after the fact.
"""

import structlog
from protean.domain import Domain

from ordering.utils.logging import configure_logging

configure_logging()

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
