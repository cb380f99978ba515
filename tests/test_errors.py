from storefront.version import API_PREFIX


def test_404_json_envelope(client):
    resp = client.get('/no/such/route')
    assert resp.status_code == 404
    data = resp.get_json()
    assert data['status'] == 'error'
    assert data['code'] == 404
    assert isinstance(data.get('message'), str)


def test_unexpected_500_json_envelope(client):
    resp = client.get('/__boom')
    assert resp.status_code == 500
    data = resp.get_json()
    assert data['status'] == 'error'
    assert data['code'] == 500
    assert 'RuntimeError' not in data['message']


def test_ok_helper_endpoint(client):
    resp = client.get('/__ok')
    assert resp.status_code == 200
    data = resp.get_json()
    assert data == {
        'status': 'success',
        'message': 'success',
        'data': {'ping': 'pong'}
    }


def test_business_error_envelope_carries_kind_and_detail(client):
    resp = client.get(f'{API_PREFIX}/products/31337')
    assert resp.status_code == 404
    data = resp.get_json()
    assert data['status'] == 'error'
    assert data['code'] == 'not_found'
    assert data['product_id'] == 31337


def test_non_object_body_is_rejected(client):
    resp = client.post(f'{API_PREFIX}/cart/add', json=[1, 2], headers={'X-Session-ID': 'x'})
    assert resp.status_code == 422
    assert resp.get_json()['code'] == 'validation_failed'
