"""
STOCK HISTORY API TESTS
POST applies a movement through the ledger; GET lists the audit trail.
"""
from datetime import datetime, timedelta
from decimal import Decimal

from configs import db
from conftest import add_material, add_product, history_count, login, make_user, stock_of
from db.models.material import Material
from db.models.product import Product
from db.models.stock_history import MovementType, StockHistory


def _apply(client, **body):
    return client.post("/api/stock-history", json=body)


def test_apply_in_and_out(app, client, material_id, user_id):
    resp = _apply(client, materialId=material_id, type="out", quantity=4, reference="SO-1")
    assert resp.status_code == 201
    row = resp.get_json()
    assert row["type"] == "out" and row["quantity"] == 4
    assert row["materialId"] == material_id and row["productId"] is None
    assert row["userId"] == user_id
    assert row["material"]["code"] == "MAT-1"
    assert stock_of(app, Material, material_id) == Decimal(6)

    resp = _apply(client, materialId=material_id, type="in", quantity=2.5)
    assert resp.status_code == 201
    assert stock_of(app, Material, material_id) == Decimal("8.5")


def test_scenario_against_database(app, client, material_id):
    assert _apply(client, materialId=material_id, type="out", quantity=4).status_code == 201
    assert stock_of(app, Material, material_id) == 6

    resp = _apply(client, materialId=material_id, type="out", quantity=10)
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "Stock cannot be negative"
    assert stock_of(app, Material, material_id) == 6
    assert history_count(app) == 1

    _apply(client, materialId=material_id, type="adjustment", quantity=0)
    assert stock_of(app, Material, material_id) == 0
    _apply(client, materialId=material_id, type="in", quantity=5)
    assert stock_of(app, Material, material_id) == 5
    assert history_count(app) == 4


def test_apply_on_product(app, client, product_id):
    resp = _apply(client, productId=product_id, type="adjustment", quantity=12)
    assert resp.status_code == 201
    assert resp.get_json()["product"]["sku"] == "PRD-1"
    assert stock_of(app, Product, product_id) == 12


def _table_state(app):
    with app.app_context():
        history = [(h.id, h.quantity) for h in StockHistory.query.order_by(StockHistory.id)]
        stocks = [(m.id, m.stock) for m in Material.query.order_by(Material.id)]
        return history, stocks


def test_failed_calls_leave_tables_unchanged(app, client, material_id, product_id):
    _apply(client, materialId=material_id, type="in", quantity=1)
    before = _table_state(app)

    bad = [
        ({"type": "in", "quantity": 1}, 400),
        ({"materialId": material_id, "productId": product_id, "type": "in", "quantity": 1}, 400),
        ({"materialId": material_id, "type": "bogus", "quantity": 1}, 400),
        ({"materialId": material_id, "type": "out", "quantity": 0}, 400),
        ({"materialId": material_id, "type": "in"}, 400),
        ({"materialId": 9999, "type": "in", "quantity": 1}, 404),
        ({"materialId": material_id, "type": "out", "quantity": 500}, 409),
    ]
    for body, status in bad:
        resp = client.post("/api/stock-history", json=body)
        assert resp.status_code == status, body
        assert "error" in resp.get_json()

    assert _table_state(app) == before


def test_validation_error_details(client, material_id):
    resp = _apply(client, materialId=material_id, type="sideways", quantity=1)
    body = resp.get_json()
    assert body["error"] == 'Invalid type. Must be either "in", "out", or "adjustment"'
    assert body["details"] == {"received": "sideways"}


def test_list_filters_and_pagination(app, client, material_id, user_id):
    pid = add_product(app, user_id, sku="PRD-2", stock=0)
    for _ in range(3):
        _apply(client, materialId=material_id, type="in", quantity=1)
    _apply(client, materialId=material_id, type="out", quantity=1)
    _apply(client, productId=pid, type="in", quantity=5)

    body = client.get("/api/stock-history?limit=2").get_json()
    assert body["meta"] == {"total": 5, "page": 1, "limit": 2, "totalPages": 3}
    assert len(body["data"]) == 2
    assert body["data"][0]["productId"] == pid  # newest first

    body = client.get("/api/stock-history?page=3&limit=2").get_json()
    assert len(body["data"]) == 1

    body = client.get("/api/stock-history?itemType=material&type=in").get_json()
    assert body["meta"]["total"] == 3
    body = client.get(f"/api/stock-history?productId={pid}").get_json()
    assert body["meta"]["total"] == 1
    body = client.get("/api/stock-history?type=all&itemType=product").get_json()
    assert body["meta"]["total"] == 1

    today = datetime.utcnow().date()
    yesterday = today - timedelta(days=1)
    body = client.get(f"/api/stock-history?startDate={today}&endDate={today}").get_json()
    assert body["meta"]["total"] == 5
    body = client.get(
        f"/api/stock-history?startDate={yesterday}&endDate={yesterday}"
    ).get_json()
    assert body["meta"]["total"] == 0

    assert client.get("/api/stock-history?page=0").status_code == 400
    assert client.get("/api/stock-history?type=sideways").status_code == 400


def test_list_only_shows_own_rows(app, client, material_id):
    _apply(client, materialId=material_id, type="in", quantity=1)
    with app.app_context():
        other = StockHistory(
            material_id=material_id, type=MovementType.IN, quantity=1, user_id=999
        )
        db.session.add(other)
        db.session.commit()
    assert client.get("/api/stock-history").get_json()["meta"]["total"] == 1


def test_cannot_move_stock_of_another_users_item(app, client, material_id):
    other_id = make_user(app, email="other@example.com")
    theirs = add_material(app, other_id, code="THEIRS", stock=10)
    before = history_count(app)

    for movement, qty in (("adjustment", 0), ("in", 5), ("out", 1)):
        resp = _apply(client, materialId=theirs, type=movement, quantity=qty)
        assert resp.status_code == 404

    assert stock_of(app, Material, theirs) == 10
    assert history_count(app) == before

    owner = login(app, "other@example.com")
    assert owner.get("/api/stock-history").get_json()["meta"]["total"] == 0
    resp = _apply(owner, materialId=theirs, type="out", quantity=3)
    assert resp.status_code == 201
    assert stock_of(app, Material, theirs) == 7
