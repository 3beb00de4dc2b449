from datetime import timedelta

from sqlalchemy import func, select

from brewco.db.models import User
from brewco.security.utils import create_access_token, decode_token
from tests.conftest import bearer


def test_register_login_scenario(client, db):
    r = client.post('/api/auth/register', json={'username': 'alice', 'email': 'alice@x.com', 'password': 'pw123'})
    assert r.status_code == 200
    body = r.json()
    assert body['success'] is True and body['token']
    user_id = body['user']['id']

    dup = client.post('/api/auth/register', json={'username': 'alice', 'email': 'other@x.com', 'password': 'pw123'})
    assert dup.status_code == 409
    assert dup.json() == {'success': False, 'error': 'Username or email already registered'}

    bad = client.post('/api/auth/login', json={'username': 'alice', 'password': 'wrongpw'})
    assert bad.status_code == 401
    assert bad.json()['success'] is False

    ok = client.post('/api/auth/login', json={'username': 'alice', 'password': 'pw123'})
    assert ok.status_code == 200
    assert ok.json()['user']['id'] == user_id
    assert db.scalar(select(func.count(User.id))) == 1


def test_duplicate_email_creates_no_row(client, db, register):
    register()
    r = client.post('/api/auth/register', json={'username': 'bob', 'email': 'ALICE@x.com', 'password': 'pw'})
    assert r.status_code == 409
    assert db.scalar(select(func.count(User.id))) == 1


def test_login_token_claims_match_stored_user(client, db, register):
    register()
    r = client.post('/api/auth/login', json={'username': 'alice@x.com', 'password': 'pw123'})
    assert r.status_code == 200
    claims = decode_token(r.json()['token'])
    user = db.execute(select(User).where(User.username == 'alice')).scalar_one()
    assert claims['id'] == user.id
    assert claims['sub'] == str(user.id)
    assert claims['username'] == user.username
    assert claims['email'] == user.email
    assert claims['role'] == 'customer'
    assert claims['kind'] == 'customer'


def test_unknown_user_and_bad_password_look_the_same(client, register):
    register()
    unknown = client.post('/api/auth/login', json={'username': 'nobody', 'password': 'pw123'})
    wrong = client.post('/api/auth/login', json={'username': 'alice', 'password': 'nope'})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()


def test_password_is_hashed(db, register):
    register()
    user = db.execute(select(User)).scalar_one()
    assert user.password_hash != 'pw123'
    assert user.password_hash.startswith('$2')


def test_register_missing_fields_is_400(client):
    r = client.post('/api/auth/register', json={'username': 'alice'})
    assert r.status_code == 400
    assert r.json()['success'] is False


def test_register_rejects_bad_email(client):
    r = client.post('/api/auth/register', json={'username': 'alice', 'email': 'not-an-email', 'password': 'pw'})
    assert r.status_code == 400
    assert 'email' in r.json()['error']


def test_me_requires_token(client):
    assert client.get('/api/auth/me').status_code == 401


def test_me_rejects_garbage_token(client):
    r = client.get('/api/auth/me', headers=bearer('not.a.jwt'))
    assert r.status_code == 403
    assert r.json() == {'success': False, 'error': 'Invalid or expired token'}


def test_me_rejects_expired_token(client, register):
    user = register()['user']
    token, _ = create_access_token(
        {'id': user['id'], 'username': 'alice', 'email': 'alice@x.com', 'role': 'customer', 'kind': 'customer'},
        timedelta(seconds=-30),
    )
    assert client.get('/api/auth/me', headers=bearer(token)).status_code == 403


def test_me_returns_profile_without_hash(client, customer):
    r = client.get('/api/auth/me', headers=bearer(customer['token']))
    assert r.status_code == 200
    user = r.json()['user']
    assert user['username'] == 'alice'
    assert user['full_name'] == 'Alice Liddell'
    assert 'password_hash' not in user


def test_profile_update_is_partial(client, customer):
    r = client.put('/api/auth/profile', json={'address': '1 Bean St'}, headers=bearer(customer['token']))
    assert r.status_code == 200
    user = r.json()['user']
    assert user['address'] == '1 Bean St'
    assert user['full_name'] == 'Alice Liddell'
    assert user['phone'] == '+15550001'


def test_profile_email_conflict(client, register):
    register()
    bob = register(username='bob', email='bob@x.com')
    r = client.put('/api/auth/profile', json={'email': 'alice@x.com'}, headers=bearer(bob['token']))
    assert r.status_code == 409


def test_admin_in_username_grants_nothing(client, register):
    token = register(username='superadmin', email='sa@x.com')['token']
    assert decode_token(token)['role'] == 'customer'
    assert client.get('/api/admin/stats', headers=bearer(token)).status_code == 403
    assert client.get('/api/admin/verify', headers=bearer(token)).status_code == 403
