"""Catalogue replica of a Store (a vendor within the marketplace)."""

from protean.fields import Boolean, String

from ordering.domain import ordering


@ordering.aggregate
class Store:
    name = String(required=True, max_length=255)
    image_url = String(max_length=1024)
    manager_name = String(max_length=255)
    manager_phone = String(max_length=20)
    city = String(max_length=100)
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)

    def is_available(self):
        return bool(self.is_active) and not self.is_deleted
