def test_test_support_unversioned_still_works(client):
    r = client.get("/__ok")
    assert r.status_code == 200
    js = r.get_json()
    assert js["status"] == "success"
    assert js["data"]["ping"] == "pong"


def test_test_support_also_available_under_api_v1(client):
    r = client.get("/api/v1/test_support/__ok")
    assert r.status_code == 200
    assert r.get_json()["data"]["ping"] == "pong"


def test_url_map_contains_api_v1_rules(app):
    rules = {str(r.rule) for r in app.url_map.iter_rules()}
    for rule in (
        "/api/v1/cart",
        "/api/v1/cart/add",
        "/api/v1/checkout",
        "/api/v1/admin/orders/<int:order_id>/status",
        "/order-success/<int:order_id>",
    ):
        assert rule in rules


def test_api_docs_list_only_versioned_routes(client):
    r = client.get("/apispec.json")
    assert r.status_code == 200
    paths = r.get_json()["paths"]
    assert paths
    assert all(p.startswith("/api/v1/") for p in paths)
