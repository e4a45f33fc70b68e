import pytest

from app import create_app
from listing import ProductRecord


def make_product(product_id, category, name=None, **extra):
    return ProductRecord(
        id=product_id,
        name=name or f"Product {product_id}",
        category=category,
        price=float(extra.pop("price", 100)),
        stock=int(extra.pop("stock", 5)),
        payload=extra,
    )


@pytest.fixture
def scenario_products():
    """3 Electronics, 2 Fashion, 1 Home, in that input order"""
    return [
        make_product(1, "Electronics", "E1"),
        make_product(2, "Electronics", "E2"),
        make_product(3, "Electronics", "E3"),
        make_product(4, "Fashion", "F1"),
        make_product(5, "Fashion", "F2"),
        make_product(6, "Home", "H1"),
    ]


@pytest.fixture
def mixed_pool():
    """A pool with canonical, non-canonical and uncategorised products"""
    categories = [
        "electronics", "Electronics", "FASHION", "Books", "", None,
        "Books", "home", "Garden ", "Grocery", "Electronics", "Fashion",
    ]
    return [make_product(i + 1, category) for i, category in enumerate(categories)]


@pytest.fixture
def seller_calls():
    return []


@pytest.fixture
def app(scenario_products, seller_calls):
    def product_source(seller_id):
        seller_calls.append(seller_id)
        return list(scenario_products)

    return create_app("testing", product_source=product_source)


@pytest.fixture
def client(app):
    return app.test_client()
