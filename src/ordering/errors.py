"""Error taxonomy for the Ordering domain.

Every error carries a stable machine-checkable ``kind``. Validation-flavoured
errors subclass Protean's ``ValidationError`` so they surface through the
same ``messages`` dict; lookups that fail subclass ``ObjectNotFoundError``.
"""

from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError


class NotFound(ObjectNotFoundError):
    """A cart, order, payment, product or store is absent or out of scope.

    Absence and "exists but filtered out" are deliberately indistinguishable.
    """

    kind = "not_found"

    def __init__(self, resource, identifier=None):
        self.resource = resource
        self.identifier = identifier
        message = f"{resource} not found" if identifier is None else f"{resource} `{identifier}` not found"
        super().__init__(message)


class CheckoutError(ValidationError):
    kind = "validation"


class EmptyCart(CheckoutError):
    kind = "empty_cart"

    def __init__(self):
        super().__init__({"cart": ["Cart is empty"]})


class NoItemsForScope(CheckoutError):
    kind = "no_items_for_scope"

    def __init__(self, store_id=None):
        self.store_id = store_id
        if store_id is None:
            message = (
                "No marketplace items in cart. To check out items from a store, "
                "pass the store_id of that store."
            )
        else:
            message = f"No items from store `{store_id}` in cart"
        super().__init__({"cart": [message]})


class ProductUnavailable(CheckoutError):
    kind = "product_unavailable"

    def __init__(self, product_ids):
        self.product_ids = list(product_ids)
        super().__init__({"product_id": [f"Product `{pid}` is no longer available" for pid in self.product_ids]})


def error_kind(exc: Exception) -> str:
    """Return the stable kind for any exception the domain may raise."""
    kind = getattr(exc, "kind", None)
    if kind:
        return kind
    if isinstance(exc, ValidationError):
        return "validation"
    if isinstance(exc, ObjectNotFoundError):
        return "not_found"
    if isinstance(exc, ExpectedVersionError):
        return "conflict"
    return "server_error"
