from storefront.version import API_PREFIX


def test_metrics_endpoint_exposes_business_counters(client, make_product):
    p = make_product(stock=1)
    client.post(f"{API_PREFIX}/cart/add", json={"product_id": p.id}, headers={"X-Session-ID": "m"})
    client.post(f"{API_PREFIX}/cart/add", json={"product_id": p.id}, headers={"X-Session-ID": "m"})
    client.post(f"{API_PREFIX}/checkout", json={}, headers={"X-Session-ID": "m"})

    resp = client.get("/metrics")
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert 'cart_mutation_total{operation="add",result="success"}' in body
    assert 'cart_mutation_total{operation="add",result="insufficient_stock"}' in body
    assert "flask_http_request_duration_seconds" in body
    assert "db_query_duration_seconds" in body


def test_metrics_endpoint_reports_app_info_and_request_metrics(client):
    client.get("/health")
    body = client.get("/metrics").get_data(as_text=True)
    assert 'app_info{version="1.0.0"} 1.0' in body
    assert 'flask_http_request_total{method="GET",status="200"}' in body


def test_each_app_gets_its_own_registry(make_app):
    first = make_app().test_client().get("/metrics")
    second = make_app().test_client().get("/metrics")
    assert first.status_code == second.status_code == 200
    assert "cart_mutation_total" in second.get_data(as_text=True)
