"""Checkout scope of a cart line: the global marketplace or one store.

A cart serves a multi-vendor storefront: every line either belongs to the
marketplace's own catalogue or to exactly one store. Checkout, clearing and
reconciliation all select lines by scope, so the selection rule lives here.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GlobalScope:
    """Marketplace items, not tied to any store."""

    store_id: None = None

    def matches(self, store_id) -> bool:
        return store_id is None

    def describe(self) -> str:
        return "global"


@dataclass(frozen=True)
class StoreScope:
    """Items from a single store's catalogue."""

    store_id: str

    def matches(self, store_id) -> bool:
        return store_id is not None and str(store_id) == self.store_id

    def describe(self) -> str:
        return f"store:{self.store_id}"


Scope = GlobalScope | StoreScope


def scope_for(store_id=None) -> Scope:
    """Build the scope for an optional store id. Blank ids mean global."""
    if store_id is None or str(store_id).strip() == "":
        return GlobalScope()
    return StoreScope(store_id=str(store_id).strip())


def normalize_store_id(store_id):
    """Store id as persisted on a line: a stripped string, or None for global."""
    return scope_for(store_id).store_id
