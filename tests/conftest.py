import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from configs import db
from db.models.material import Material
from db.models.product import Product
from db.models.stock_history import StockHistory
from db.models.user import User, UserRole

PASSWORD = "secret123"


@pytest.fixture
def app():
    """
    Flask app on an isolated in-memory database.

    No app context stays pushed during the test: each request then gets its
    own context (and its own ``g``), like in production.
    """
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "SECRET_KEY": "test-secret",
            "LOG_LEVEL": "WARNING",
        }
    )
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


def make_user(
    app, email="owner@example.com", role=UserRole.STAFF, verified=True, active=True
):
    with app.app_context():
        u = User(
            email=email,
            name=email.split("@")[0],
            password_hash=generate_password_hash(PASSWORD),
            role=role,
            is_verified=verified,
            is_active=active,
        )
        db.session.add(u)
        db.session.commit()
        return u.id


def login(app, email):
    c = app.test_client()
    resp = c.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.get_json()
    return c


@pytest.fixture
def user_id(app):
    return make_user(app)


@pytest.fixture
def client(app, user_id):
    """Test client logged in as the ``user_id`` user."""
    return login(app, "owner@example.com")


@pytest.fixture
def anon(app):
    return app.test_client()


def add_material(app, user_id, code="MAT-1", stock=10, price=10, min_stock=2):
    with app.app_context():
        m = Material(
            code=code,
            name=f"Material {code}",
            unit="kg",
            price=price,
            stock=stock,
            min_stock=min_stock,
            user_id=user_id,
        )
        db.session.add(m)
        db.session.commit()
        return m.id


def add_product(app, user_id, sku="PRD-1", stock=4, price=25, min_stock=1):
    with app.app_context():
        p = Product(
            sku=sku,
            name=f"Product {sku}",
            price=price,
            stock=stock,
            min_stock=min_stock,
            user_id=user_id,
        )
        db.session.add(p)
        db.session.commit()
        return p.id


@pytest.fixture
def material_id(app, user_id):
    return add_material(app, user_id)


@pytest.fixture
def product_id(app, user_id):
    return add_product(app, user_id)


def stock_of(app, model, item_id):
    with app.app_context():
        item = db.session.get(model, item_id)
        return None if item is None else item.stock


def history_count(app, **filters):
    with app.app_context():
        return StockHistory.query.filter_by(**filters).count()
