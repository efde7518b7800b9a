import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Catalogue seeding
# ---------------------------------------------------------------------------
@pytest.fixture()
def seed_store():
    """Replicate a store into the domain, as the catalogue feed would."""
    from ordering.catalogue.sync import SyncStore

    def _seed(store_id="store-a", name="Store A", **fields):
        command = SyncStore(store_id=store_id, name=name, **fields)
        return current_domain.process(command, asynchronous=False)

    return _seed


@pytest.fixture()
def seed_product():
    """Replicate a product; ``store_ids`` left empty makes it a marketplace product."""
    from ordering.catalogue.sync import SyncProduct

    def _seed(product_id, price=100.0, offer_price=None, store_ids=None, name=None, **fields):
        command = SyncProduct(
            product_id=product_id,
            name=name or f"Product {product_id}",
            price=price,
            offer_price=offer_price,
            store_ids=store_ids or [],
            **fields,
        )
        return current_domain.process(command, asynchronous=False)

    return _seed
