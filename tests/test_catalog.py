import pytest
import requests

import catalog
from catalog import CatalogError, fetch_json, fetch_product_pool, parse_products
from listing import PLACEHOLDER_IMAGE_URL, mix_products


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


@pytest.fixture
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr(catalog.time, "sleep", sleeps.append)
    return sleeps


def install_responses(monkeypatch, *responses):
    calls = []
    queue = list(responses)

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(catalog.requests, "get", fake_get)
    return calls


LISTING = {
    "products": [
        {"id": 1, "name": "Phone", "category": "Mobiles", "price": 15999, "imageUrl": "phone.jpg"},
        {"id": 2, "name": "Shirt", "category": "fashion", "price": 799, "sellerId": 9},
    ],
    "pagination": {"total": 2, "totalPages": 1, "currentPage": 1, "limit": 500},
}


def test_fetch_product_pool(monkeypatch):
    calls = install_responses(monkeypatch, FakeResponse(LISTING))

    products = fetch_product_pool("http://catalog.test/", pool_size=500)

    assert [p.name for p in products] == ["Phone", "Shirt"]
    assert products[1].payload == LISTING["products"][1]
    assert calls == [{
        "url": "http://catalog.test/api/products",
        "params": {"page": 1, "limit": 500},
        "timeout": 15,
    }]


def test_fetch_product_pool_for_seller(monkeypatch):
    calls = install_responses(monkeypatch, FakeResponse(LISTING))

    fetch_product_pool("http://catalog.test", pool_size=100, seller_id="9", timeout=5)

    assert calls[0]["params"] == {"page": 1, "limit": 100, "sellerId": "9"}
    assert calls[0]["timeout"] == 5


def test_fetch_json_retries_with_backoff(monkeypatch, no_sleep):
    calls = install_responses(
        monkeypatch,
        requests.ConnectionError("connection refused"),
        FakeResponse(status_code=503),
        FakeResponse({"products": []}),
    )

    payload = fetch_json("http://catalog.test/api/products", max_retries=3, delay=0.5)

    assert payload == {"products": []}
    assert len(calls) == 3
    assert no_sleep == [0.5, 1.0]


def test_fetch_json_gives_up(monkeypatch, no_sleep):
    install_responses(
        monkeypatch,
        FakeResponse(status_code=500),
        FakeResponse(status_code=500),
    )

    with pytest.raises(CatalogError):
        fetch_json("http://catalog.test/api/products", max_retries=2, delay=0)


def test_fetch_json_rejects_non_json(monkeypatch, no_sleep):
    install_responses(monkeypatch, FakeResponse(payload=None))

    with pytest.raises(CatalogError):
        fetch_json("http://catalog.test/api/products", max_retries=1)


def test_parse_products_skips_malformed_entries():
    products = parse_products({
        "products": [
            {"id": 1, "name": "Good"},
            {"name": "Missing id"},
            {"id": "abc", "name": "Bad id"},
            "not an object",
            {"id": 2, "name": "Also good", "category": None},
        ]
    })

    assert [p.id for p in products] == [1, 2]


@pytest.mark.parametrize("payload", [
    None,
    [],
    {"error": "Failed to fetch products"},
    {"products": "nope"},
])
def test_parse_products_requires_product_list(payload):
    with pytest.raises(CatalogError):
        parse_products(payload)


def test_upstream_products_survive_the_pipeline_unchanged():
    upstream = [
        {"id": 1, "name": "Phone", "category": "Mobiles", "price": "N/A", "stock": None,
         "images": '["phone-front.jpg", "phone-back.jpg"]'},
        {"id": 2, "name": "Shirt", "category": "fashion", "price": "799.00", "stock": "12.0",
         "sellerId": 9, "approved": True},
        {"id": 3, "name": "Mixer", "category": "Appliances", "price": 2499, "stock": 0,
         "image_url": "mixer.jpg", "specifications": None},
        {"id": 4, "name": "Mystery box", "category": "", "price": None, "stock": "lots"},
        {"id": 5, "name": "Sofa", "category": "home", "price": "15,999", "stock": 2,
         "imageUrl": "sofa.jpg", "createdAt": "2024-05-01T10:00:00Z"},
    ]

    products = parse_products({"products": [dict(p) for p in upstream]})
    page = mix_products(products, 1, 10)

    assert sorted(p.id for p in page) == [1, 2, 3, 4, 5]
    served = {item["id"]: item for item in (p.to_dict() for p in page)}
    expected_images = {
        1: "phone-front.jpg",
        2: PLACEHOLDER_IMAGE_URL,
        3: "mixer.jpg",
        4: PLACEHOLDER_IMAGE_URL,
        5: "sofa.jpg",
    }
    for original in upstream:
        assert served[original["id"]] == dict(original, imageUrl=expected_images[original["id"]])
