from datetime import timedelta

import pytest
from sqlalchemy import select

from brewco.core.errors import ConflictError
from brewco.db.models import Admin, Order, Product
from brewco.security.utils import now_utc
from brewco.services.admin import create_admin
from tests.conftest import bearer

FLAT_WHITE = {'id': 1, 'name': 'Flat White', 'price': 3.5, 'quantity': 2}

ADMIN_ROUTES = [
    ('GET', '/api/admin/verify'),
    ('GET', '/api/admin/stats'),
    ('GET', '/api/admin/products'),
    ('POST', '/api/admin/products'),
    ('PUT', '/api/admin/products/1'),
    ('DELETE', '/api/admin/products/1'),
    ('GET', '/api/admin/orders'),
    ('PUT', '/api/admin/orders/1/status'),
    ('GET', '/api/admin/orders/1/details'),
    ('GET', '/api/admin/users'),
]
PAYLOAD_KEYS = {'products', 'orders', 'users', 'overview', 'order', 'product', 'admin'}


def place_order(client, token, items=(FLAT_WHITE,)):
    r = client.post('/api/orders', json={'items': list(items)}, headers=bearer(token))
    assert r.status_code == 200, r.text
    return r.json()['orderId']


@pytest.mark.parametrize('method,path', ADMIN_ROUTES)
def test_admin_routes_without_token(client, make_product, method, path):
    make_product()
    r = client.request(method, path, json={'status': 'ready', 'name': 'x', 'price': 1, 'category': 'c'})
    assert r.status_code == 401
    assert not PAYLOAD_KEYS & set(r.json())


@pytest.mark.parametrize('method,path', ADMIN_ROUTES)
def test_admin_routes_reject_customer_and_garbage(client, customer, make_product, method, path):
    make_product()
    for token in (customer['token'], 'garbage'):
        r = client.request(method, path, json={'status': 'ready'}, headers=bearer(token))
        assert r.status_code == 403
        assert r.json()['success'] is False
        assert not PAYLOAD_KEYS & set(r.json())


def test_admin_login_and_verify(client, admin_token):
    r = client.get('/api/admin/verify', headers=bearer(admin_token))
    assert r.status_code == 200
    assert r.json()['admin']['username'] == 'root'
    assert r.json()['admin']['role'] == 'admin'


def test_admin_login_wrong_password(client, db):
    create_admin(db, 'root', 'rootpass')
    r = client.post('/api/admin/login', json={'username': 'root', 'password': 'nope'})
    assert r.status_code == 401


def test_customer_credentials_do_not_open_back_office(client, register):
    register(username='admin', email='admin@x.com', password='pw123')
    r = client.post('/api/admin/login', json={'username': 'admin', 'password': 'pw123'})
    assert r.status_code == 401


def test_demoted_admin_loses_access(client, db, admin_token):
    admin = db.execute(select(Admin).where(Admin.username == 'root')).scalar_one()
    admin.role = 'viewer'
    db.commit()
    assert client.get('/api/admin/stats', headers=bearer(admin_token)).status_code == 403


def test_duplicate_admin(db):
    create_admin(db, 'root', 'a')
    with pytest.raises(ConflictError):
        create_admin(db, 'root', 'b')


def test_product_crud(client, db, admin_token):
    h = bearer(admin_token)
    r = client.post('/api/admin/products', json={'name': 'Cortado', 'price': 3.2, 'category': 'hot-coffee',
                                                 'description': 'Equal parts', 'stock': 10}, headers=h)
    assert r.status_code == 201
    product = r.json()['product']
    assert product['price'] == 3.2 and product['is_available'] is True

    r = client.put(f"/api/admin/products/{product['id']}", json={'price': 3.4}, headers=h)
    assert r.status_code == 200
    updated = r.json()['product']
    assert updated['price'] == 3.4
    assert updated['name'] == 'Cortado'
    assert updated['description'] == 'Equal parts'
    assert updated['stock'] == 10

    r = client.put(f"/api/admin/products/{product['id']}", json={'name': None, 'is_available': False}, headers=h)
    assert r.json()['product']['name'] == 'Cortado'
    assert r.json()['product']['is_available'] is False
    assert client.get('/api/products').json()['products'] == []

    assert client.delete(f"/api/admin/products/{product['id']}", headers=h).status_code == 200
    assert client.delete(f"/api/admin/products/{product['id']}", headers=h).status_code == 404
    assert db.scalar(select(Product.id)) is None


def test_product_create_validation(client, admin_token):
    r = client.post('/api/admin/products', json={'name': 'Cortado'}, headers=bearer(admin_token))
    assert r.status_code == 400
    r = client.post('/api/admin/products', json={'name': 'Cortado', 'price': -1, 'category': 'x'}, headers=bearer(admin_token))
    assert r.status_code == 400


def test_update_missing_product(client, admin_token):
    r = client.put('/api/admin/products/404', json={'price': 2}, headers=bearer(admin_token))
    assert r.status_code == 404


def test_admin_products_include_unavailable(client, admin_token, make_product):
    make_product(name='Hidden', is_available=False)
    make_product(name='Shown')
    r = client.get('/api/admin/products', headers=bearer(admin_token))
    assert {p['name'] for p in r.json()['products']} == {'Hidden', 'Shown'}


def test_orders_list_paginated(client, admin_token, customer):
    ids = [place_order(client, customer['token']) for _ in range(3)]
    r = client.get('/api/admin/orders', params={'page': 1, 'limit': 2}, headers=bearer(admin_token))
    assert r.status_code == 200
    body = r.json()
    assert [o['id'] for o in body['orders']] == [ids[2], ids[1]]
    assert body['orders'][0]['customer_username'] == 'alice'
    assert body['pagination'] == {'total': 3, 'page': 1, 'limit': 2, 'pages': 2}

    page2 = client.get('/api/admin/orders', params={'page': 2, 'limit': 2}, headers=bearer(admin_token)).json()
    assert [o['id'] for o in page2['orders']] == [ids[0]]


@pytest.mark.parametrize('params', [{'page': 0}, {'limit': 0}, {'limit': 500}])
def test_bad_pagination(client, admin_token, params):
    assert client.get('/api/admin/orders', params=params, headers=bearer(admin_token)).status_code == 400


def test_order_status_update(client, db, admin_token, customer):
    order_id = place_order(client, customer['token'])
    h = bearer(admin_token)
    r = client.put(f'/api/admin/orders/{order_id}/status', json={'status': 'ready'}, headers=h)
    assert r.status_code == 200
    assert r.json()['order']['status'] == 'ready'
    assert db.get(Order, order_id).status == 'ready'

    assert client.put(f'/api/admin/orders/{order_id}/status', json={'status': 'teleported'}, headers=h).status_code == 400
    assert client.put(f'/api/admin/orders/{order_id}/status', json={}, headers=h).status_code == 400
    assert client.put('/api/admin/orders/999/status', json={'status': 'ready'}, headers=h).status_code == 404


def test_order_details(client, admin_token, customer):
    order_id = place_order(client, customer['token'])
    r = client.get(f'/api/admin/orders/{order_id}/details', headers=bearer(admin_token))
    assert r.status_code == 200
    order = r.json()['order']
    assert order['customer_username'] == 'alice'
    assert order['items'][0]['product_name'] == 'Flat White'
    assert client.get('/api/admin/orders/999/details', headers=bearer(admin_token)).status_code == 404


def test_users_list(client, admin_token, register):
    register()
    register(username='bob', email='bob@x.com')
    r = client.get('/api/admin/users', headers=bearer(admin_token))
    body = r.json()
    assert [u['username'] for u in body['users']] == ['bob', 'alice']
    assert all('password_hash' not in u for u in body['users'])
    assert body['pagination']['total'] == 2


def test_stats(client, db, admin_token, customer, register, make_product):
    make_product(name='On menu')
    make_product(name='Off menu', is_available=False)
    bob = register(username='bob', email='bob@x.com')

    place_order(client, customer['token'])  # 7.00
    place_order(client, customer['token'], [{'id': 2, 'name': 'Cold Brew', 'price': 4.0, 'quantity': 1}])
    cancelled = place_order(client, bob['token'], [{'id': 2, 'name': 'Cold Brew', 'price': 4.0, 'quantity': 5}])
    old = place_order(client, bob['token'])

    db.get(Order, cancelled).status = 'cancelled'
    db.get(Order, old).created_at = now_utc() - timedelta(days=3)
    db.commit()

    r = client.get('/api/admin/stats', headers=bearer(admin_token))
    assert r.status_code == 200
    body = r.json()
    assert body['overview'] == {
        'total_orders': 4,
        'total_revenue': 18.0,
        'today_orders': 3,
        'today_revenue': 11.0,
        'total_products': 1,
        'active_users': 2,
    }
    assert len(body['recent_orders']) == 4
    assert body['top_products'][0] == {'product_id': 1, 'product_name': 'Flat White', 'quantity': 4}
