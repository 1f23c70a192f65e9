"""
Pytest fixtures for Shopicano backend tests.

Provides an in-memory database, an in-memory blob store, a seeded platform
(settings, permission groups, admin) and two active stores with their own
staff, so tenant isolation can be checked from both sides.
"""

import hashlib
from datetime import timedelta

import pytest
from sqlalchemy import text

from shopicano import create_app
from shopicano.cli import seed_platform
from shopicano.errors import NotFoundError
from shopicano.extensions import STORAGE_KEY, db
from shopicano.models import Address, PaymentMethod, Product, ShippingMethod, Staff, Store, User
from shopicano.models.stores import STORE_ACTIVE
from shopicano.passwords import hash_password
from shopicano.permissions import STORE_ADMIN_GROUP_ID, USER_GROUP_ID
from shopicano.storage import StoredObject
from shopicano.time_utils import utcnow

TEST_PASSWORD = "Password123!"
ADMIN_EMAIL = "admin@shopicano.test"


class FakeStorage:
    """In-memory stand-in for BlobStorage with the same get/put surface."""

    def __init__(self):
        self.objects = {}

    def put(self, name, data, content_type):
        self.objects[name] = StoredObject(
            name=name,
            data=data,
            content_type=content_type,
            etag=hashlib.md5(data).hexdigest(),
        )
        return name

    def get(self, name):
        try:
            return self.objects[name]
        except KeyError:
            raise NotFoundError("File not found") from None


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'BCRYPT_ROUNDS': 4,
        'ADMIN_EMAIL': ADMIN_EMAIL,
        'ADMIN_PASSWORD': TEST_PASSWORD,
        'BLOB_STORAGE': FakeStorage(),
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every table before the test; schema is kept."""
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def foreign_keys(db_session):
    """Turn on SQLite foreign key enforcement, as PostgreSQL always has it."""
    db_session.commit()
    db_session.execute(text("PRAGMA foreign_keys=ON"))
    yield
    db_session.rollback()
    db_session.execute(text("PRAGMA foreign_keys=OFF"))


@pytest.fixture(scope='function')
def storage(app):
    fake = app.extensions[STORAGE_KEY]
    fake.objects.clear()
    return fake


@pytest.fixture(scope='function')
def platform(db_session):
    """Settings row, the five permission groups and the admin user."""
    admin = seed_platform(db_session, ADMIN_EMAIL, TEST_PASSWORD, bcrypt_rounds=4)
    db_session.commit()
    return admin


@pytest.fixture(scope='function')
def make_user(db_session, platform):
    """Factory: create an active user in the platform `user` group."""
    def _make(email, name="Test User", permission_id=USER_GROUP_ID):
        user = User(
            name=name,
            email=email,
            password=hash_password(TEST_PASSWORD, rounds=4),
            permission_id=permission_id,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture(scope='function')
def make_store(db_session, make_user):
    """Factory: create a store (active by default) with a creator in store_admin."""
    def _make(name, owner_email, status=STORE_ACTIVE):
        owner = make_user(owner_email, name=f"{name} Owner")
        store = Store(
            name=name,
            address="1 Market Street",
            city="Dhaka",
            country="Bangladesh",
            postcode="1207",
            email=owner_email,
            phone="+8801000000000",
            status=status,
        )
        db_session.add(store)
        db_session.flush()
        db_session.add(Staff(
            user_id=owner.id,
            store_id=store.id,
            permission_id=STORE_ADMIN_GROUP_ID,
            is_creator=True,
        ))
        db_session.commit()
        return store, owner

    return _make


@pytest.fixture(scope='function')
def store_a(make_store):
    return make_store("Store A", "owner_a@shopicano.test")


@pytest.fixture(scope='function')
def store_b(make_store):
    return make_store("Store B", "owner_b@shopicano.test")


@pytest.fixture(scope='function')
def customer(make_user):
    return make_user("customer@shopicano.test", name="Customer")


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: create a published product in a store."""
    def _make(store, sku, price=1000, stock=10, **kwargs):
        fields = {
            "name": f"Product {sku}",
            "unit": "pcs",
            "is_published": True,
            "is_shippable": True,
        }
        fields.update(kwargs)
        product = Product(store_id=store.id, sku=sku, price=price, stock=stock, **fields)
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture(scope='function')
def checkout_setup(db_session, store_a, customer, make_product):
    """A store with one product, published methods and a customer address."""
    store, owner = store_a
    product = make_product(store, "SKU-1", price=1000, stock=5)
    payment = PaymentMethod(store_id=store.id, name="Cash", processing_fee=0, is_flat=True, is_published=True)
    shipping = ShippingMethod(store_id=store.id, name="Courier", delivery_charge=100, is_published=True)
    address = Address(
        user_id=customer.id,
        name="Home",
        address="2 Lake Road",
        city="Dhaka",
        country="Bangladesh",
        postcode="1212",
        phone="+8801111111111",
    )
    db_session.add_all([payment, shipping, address])
    db_session.commit()
    return {
        "store": store,
        "owner": owner,
        "product": product,
        "payment": payment,
        "shipping": shipping,
        "address": address,
    }


def coupon_window():
    """(start, end) ISO strings bracketing now."""
    now = utcnow()
    return (
        (now - timedelta(days=1)).isoformat() + "Z",
        (now + timedelta(days=1)).isoformat() + "Z",
    )


def get_auth_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get an access token for a user."""
    response = client.post('/v1/users/login/', json={
        'email': email,
        'password': password,
    })
    if response.status_code == 200:
        return response.json['data']['access_token']
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def login_headers(client, email: str) -> dict:
    return auth_headers(get_auth_token(client, email))
