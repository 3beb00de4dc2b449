import os

# settings are read at import time
os.environ['POSTGRES_DSN'] = 'sqlite://'
os.environ['JWT_SECRET'] = 'test-secret'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

import brewco.db.models  # noqa
from brewco.db.models import Product
from brewco.db.session import Base, SessionLocal, engine
from brewco.main import app
from brewco.services.admin import create_admin


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def make_product(db):
    def _make(**kw):
        fields = {'name': 'Flat White', 'price': Decimal('3.50'), 'category': 'hot-coffee', 'description': ''}
        fields.update(kw)
        obj = Product(**fields)
        db.add(obj); db.commit(); db.refresh(obj)
        return obj
    return _make


@pytest.fixture
def register(client):
    def _register(username='alice', email='alice@x.com', password='pw123', **profile):
        resp = client.post('/api/auth/register', json={'username': username, 'email': email, 'password': password, **profile})
        assert resp.status_code == 200, resp.text
        return resp.json()
    return _register


@pytest.fixture
def customer(register):
    return register(full_name='Alice Liddell', phone='+15550001')


@pytest.fixture
def admin_token(client, db):
    create_admin(db, 'root', 'rootpass', email='root@brewco.test')
    resp = client.post('/api/admin/login', json={'username': 'root', 'password': 'rootpass'})
    assert resp.status_code == 200, resp.text
    return resp.json()['token']
