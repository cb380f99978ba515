import pytest

SHOP_ORIGINS = "http://localhost:3000,https://shop.example.com"


def _preflight(client, origin, method="POST", path="/api/v1/cart/add"):
    return client.open(
        path,
        method="OPTIONS",
        headers={
            "Origin": origin,
            "Access-Control-Request-Method": method,
            "Access-Control-Request-Headers": "Content-Type, X-Session-ID",
        },
    )


@pytest.mark.parametrize("origin", ["http://localhost:3000", "https://shop.example.com"])
def test_storefront_origins_may_send_cart_requests(make_app, origin):
    client = make_app(CORS_ALLOWED_ORIGINS=SHOP_ORIGINS).test_client()
    resp = _preflight(client, origin)
    assert resp.status_code in (200, 204)
    assert resp.headers.get("Access-Control-Allow-Origin") == origin
    assert resp.headers.get("Access-Control-Allow-Credentials") == "true"


def test_unknown_origin_gets_no_cors_grant(make_app):
    client = make_app(CORS_ALLOWED_ORIGINS="https://shop.example.com").test_client()
    resp = _preflight(client, "http://evil.test", method="GET", path="/api/v1/cart")
    assert resp.status_code in (200, 204)
    assert "Access-Control-Allow-Origin" not in resp.headers


def test_session_and_trace_headers_are_readable_by_the_browser(client, make_product):
    p = make_product(stock=3)
    resp = client.post(
        "/api/v1/cart/add",
        json={"product_id": p.id},
        headers={"Origin": "http://any.test", "X-Request-ID": "req-77"},
    )
    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == "req-77"
    assert resp.headers.get("X-Session-ID")
    expose = resp.headers.get("Access-Control-Expose-Headers", "")
    for header in ("X-Request-ID", "X-Session-ID", "traceparent"):
        assert header in expose


@pytest.mark.parametrize("header,value", [
    ("X-Content-Type-Options", "nosniff"),
    ("X-Frame-Options", "DENY"),
    ("Referrer-Policy", "no-referrer"),
])
def test_security_headers_on_error_responses(client, header, value):
    resp = client.get("/api/v1/products/424242")
    assert resp.status_code == 404
    assert resp.headers.get(header) == value
