# dao/product.py
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from configs import db
from dao.errors import NotFoundError, ValidationError
from db.models.product import Product
from db.models.purchase import PurchaseItem
from db.models.stock_history import StockHistory

STATUSES = ("active", "inactive")
_EDITABLE = ("sku", "name", "description", "category", "price", "min_stock", "status")


def _num(value, field_name: str, default=0) -> Decimal:
    if value is None or value == "":
        return Decimal(str(default))
    try:
        n = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number", details={field_name: value})
    if not n.is_finite() or n < 0:
        raise ValidationError(
            f"{field_name} must be a non-negative number", details={field_name: value}
        )
    return n


def _status(value) -> str:
    s = (value or "active").strip().lower()
    if s not in STATUSES:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(STATUSES)}", details={"status": value}
        )
    return s


def list_products(user_id: int) -> List[Product]:
    return (
        Product.query.filter_by(user_id=user_id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def get_product(product_id: int, user_id: int) -> Optional[Product]:
    return Product.query.filter_by(id=product_id, user_id=user_id).one_or_none()


def require_product(product_id: int, user_id: int) -> Product:
    p = get_product(product_id, user_id)
    if not p:
        raise NotFoundError("Product not found")
    return p


def sku_exists(sku: str, user_id: int, exclude_id: Optional[int] = None) -> bool:
    q = Product.query.filter(Product.user_id == user_id, Product.sku == (sku or "").strip())
    if exclude_id:
        q = q.filter(Product.id != exclude_id)
    return db.session.query(q.exists()).scalar()


def create_product(user_id: int, data: dict) -> Product:
    sku = (data.get("sku") or "").strip()
    name = (data.get("name") or "").strip()
    if not sku:
        raise ValidationError("Product SKU is required")
    if not name:
        raise ValidationError("Product name is required")
    if sku_exists(sku, user_id):
        raise ValidationError("Product with this SKU already exists")

    # initial stock is the ledger's starting value; later changes go through stock history
    p = Product(
        sku=sku,
        name=name,
        description=data.get("description"),
        category=data.get("category"),
        price=_num(data.get("price"), "price"),
        stock=_num(data.get("stock"), "stock"),
        min_stock=_num(data.get("minStock"), "minStock"),
        status=_status(data.get("status")),
        user_id=user_id,
    )
    db.session.add(p)
    _commit()
    return p


def update_product(product_id: int, user_id: int, data: dict) -> Product:
    p = require_product(product_id, user_id)
    fields = dict(data)
    if "minStock" in fields:
        fields["min_stock"] = fields.pop("minStock")

    for k in _EDITABLE:
        if k not in fields:
            continue
        v = fields[k]
        if k == "sku":
            v = (v or "").strip()
            if not v:
                raise ValidationError("Product SKU is required")
            if sku_exists(v, user_id, exclude_id=p.id):
                raise ValidationError("Product with this SKU already exists")
        elif k == "name":
            v = (v or "").strip()
            if not v:
                raise ValidationError("Product name is required")
        elif k in ("price", "min_stock"):
            v = _num(v, k)
        elif k == "status":
            v = _status(v)
        setattr(p, k, v)
    _commit()
    return p


def set_status(product_id: int, user_id: int, status) -> Product:
    p = require_product(product_id, user_id)
    p.status = _status(status)
    _commit()
    return p


def _detach(ids: List[int]) -> None:
    StockHistory.query.filter(StockHistory.product_id.in_(ids)).delete(
        synchronize_session=False
    )
    PurchaseItem.query.filter(PurchaseItem.product_id.in_(ids)).update(
        {PurchaseItem.product_id: None}, synchronize_session=False
    )


def delete_product(product_id: int, user_id: int) -> None:
    p = require_product(product_id, user_id)
    _detach([p.id])
    db.session.delete(p)
    _commit()


def bulk_delete(ids, user_id: int) -> int:
    if not isinstance(ids, list) or not ids:
        raise ValidationError("Invalid request", details="ids must be a non-empty array")
    owned = [
        pid
        for (pid,) in db.session.query(Product.id)
        .filter(Product.id.in_(ids), Product.user_id == user_id)
        .all()
    ]
    if owned:
        _detach(owned)
        Product.query.filter(Product.id.in_(owned)).delete(synchronize_session=False)
    _commit()
    return len(owned)


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
