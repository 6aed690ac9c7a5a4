"""
MATERIAL & PRODUCT API TESTS
CRUD, per-user scoping, and the rule that stock is not editable outside the ledger.
"""
from decimal import Decimal

from conftest import add_material, history_count, login, make_user, stock_of
from db.models.material import Material
from db.models.product import Product


def test_create_and_list_material(client):
    resp = client.post(
        "/api/materials",
        json={
            "code": "MAT-9",
            "name": "Sugar",
            "unit": "kg",
            "price": "12.5",
            "stock": 8,
            "minStock": 2,
        },
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["stock"] == 8 and body["price"] == 12.5 and body["status"] == "active"

    listed = client.get("/api/materials").get_json()
    assert [m["code"] for m in listed] == ["MAT-9"]


def test_duplicate_code_rejected(client, material_id):
    resp = client.post("/api/materials", json={"code": "MAT-1", "name": "Again"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Material with this code already exists"
    assert client.get("/api/materials/check-code?code=MAT-1").get_json() == {"exists": True}
    assert client.get("/api/materials/check-code?code=NEW").get_json() == {"exists": False}


def test_negative_initial_stock_rejected(client):
    resp = client.post("/api/materials", json={"code": "M", "name": "x", "stock": -1})
    assert resp.status_code == 400


def test_update_ignores_stock(app, client, material_id):
    resp = client.put(
        f"/api/materials/{material_id}",
        json={"name": "Fine flour", "stock": 999, "minStock": 5},
    )
    assert resp.status_code == 200
    assert resp.get_json()["name"] == "Fine flour"
    assert stock_of(app, Material, material_id) == Decimal(10)


def test_status_toggle(client, material_id):
    resp = client.patch(f"/api/materials/{material_id}/status", json={"status": "inactive"})
    assert resp.get_json()["status"] == "inactive"
    resp = client.patch(f"/api/materials/{material_id}/status", json={"status": "gone"})
    assert resp.status_code == 400


def test_delete_material_removes_its_history(app, client, material_id):
    client.post(
        "/api/stock-history", json={"materialId": material_id, "type": "in", "quantity": 1}
    )
    assert history_count(app, material_id=material_id) == 1

    assert client.delete(f"/api/materials/{material_id}").status_code == 200
    assert client.get(f"/api/materials/{material_id}").status_code == 404
    assert history_count(app, material_id=material_id) == 0


def test_bulk_delete_only_touches_own_rows(app, client, user_id):
    mine = [add_material(app, user_id, code=f"M{i}") for i in range(3)]
    other_id = make_user(app, email="other@example.com")
    theirs = add_material(app, other_id, code="M0")

    resp = client.post("/api/materials/bulk-delete", json={"ids": mine[:2] + [theirs]})
    assert resp.get_json()["count"] == 2
    assert stock_of(app, Material, theirs) is not None
    assert stock_of(app, Material, mine[2]) is not None
    assert client.post("/api/materials/bulk-delete", json={"ids": []}).status_code == 400


def test_materials_are_scoped_per_user(app, client, material_id):
    make_user(app, email="other@example.com")
    other = login(app, "other@example.com")
    assert other.get("/api/materials").get_json() == []
    assert other.get(f"/api/materials/{material_id}").status_code == 404


def test_product_crud(app, client):
    resp = client.post(
        "/api/products", json={"sku": "P-1", "name": "Cake", "price": 90, "stock": 3}
    )
    assert resp.status_code == 201
    pid = resp.get_json()["id"]

    assert client.post("/api/products", json={"sku": "P-1", "name": "Dup"}).status_code == 400
    assert client.get("/api/products/check-sku?sku=P-1").get_json() == {"exists": True}

    resp = client.put(f"/api/products/{pid}", json={"price": 95, "stock": 50})
    assert resp.get_json()["price"] == 95
    assert stock_of(app, Product, pid) == Decimal(3)

    assert client.delete(f"/api/products/{pid}").status_code == 200
    assert client.get("/api/products").get_json() == []


def test_invalid_json_body(client):
    resp = client.post("/api/products", data="not json", content_type="application/json")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid JSON in request body"
