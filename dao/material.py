# dao/material.py
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from configs import db
from dao.errors import NotFoundError, ValidationError
from db.models.material import Material
from db.models.purchase import PurchaseItem
from db.models.stock_history import StockHistory

STATUSES = ("active", "inactive")
_EDITABLE = ("code", "name", "description", "unit", "category", "price", "min_stock", "status")


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


def list_materials(user_id: int) -> List[Material]:
    return (
        Material.query.filter_by(user_id=user_id)
        .order_by(Material.created_at.desc(), Material.id.desc())
        .all()
    )


def get_material(material_id: int, user_id: int) -> Optional[Material]:
    return Material.query.filter_by(id=material_id, user_id=user_id).one_or_none()


def require_material(material_id: int, user_id: int) -> Material:
    m = get_material(material_id, user_id)
    if not m:
        raise NotFoundError("Material not found")
    return m


def code_exists(code: str, user_id: int, exclude_id: Optional[int] = None) -> bool:
    q = Material.query.filter(Material.user_id == user_id, Material.code == (code or "").strip())
    if exclude_id:
        q = q.filter(Material.id != exclude_id)
    return db.session.query(q.exists()).scalar()


def create_material(user_id: int, data: dict) -> Material:
    code = (data.get("code") or "").strip()
    name = (data.get("name") or "").strip()
    if not code:
        raise ValidationError("Material code is required")
    if not name:
        raise ValidationError("Material name is required")
    if code_exists(code, user_id):
        raise ValidationError("Material with this code already exists")

    # initial stock is the ledger's starting value; later changes go through stock history
    m = Material(
        code=code,
        name=name,
        description=data.get("description"),
        unit=data.get("unit") or "pcs",
        category=data.get("category"),
        price=_num(data.get("price"), "price"),
        stock=_num(data.get("stock"), "stock"),
        min_stock=_num(data.get("minStock"), "minStock"),
        status=_status(data.get("status")),
        user_id=user_id,
    )
    db.session.add(m)
    _commit()
    return m


def update_material(material_id: int, user_id: int, data: dict) -> Material:
    m = require_material(material_id, user_id)
    fields = dict(data)
    if "minStock" in fields:
        fields["min_stock"] = fields.pop("minStock")

    for k in _EDITABLE:
        if k not in fields:
            continue
        v = fields[k]
        if k == "code":
            v = (v or "").strip()
            if not v:
                raise ValidationError("Material code is required")
            if code_exists(v, user_id, exclude_id=m.id):
                raise ValidationError("Material with this code already exists")
        elif k == "name":
            v = (v or "").strip()
            if not v:
                raise ValidationError("Material name is required")
        elif k in ("price", "min_stock"):
            v = _num(v, k)
        elif k == "status":
            v = _status(v)
        setattr(m, k, v)
    _commit()
    return m


def set_status(material_id: int, user_id: int, status) -> Material:
    m = require_material(material_id, user_id)
    m.status = _status(status)
    _commit()
    return m


def _detach(ids: List[int]) -> None:
    StockHistory.query.filter(StockHistory.material_id.in_(ids)).delete(
        synchronize_session=False
    )
    PurchaseItem.query.filter(PurchaseItem.material_id.in_(ids)).update(
        {PurchaseItem.material_id: None}, synchronize_session=False
    )


def delete_material(material_id: int, user_id: int) -> None:
    m = require_material(material_id, user_id)
    _detach([m.id])
    db.session.delete(m)
    _commit()


def bulk_delete(ids, user_id: int) -> int:
    if not isinstance(ids, list) or not ids:
        raise ValidationError("Invalid request", details="ids must be a non-empty array")
    owned = [
        mid
        for (mid,) in db.session.query(Material.id)
        .filter(Material.id.in_(ids), Material.user_id == user_id)
        .all()
    ]
    if owned:
        _detach(owned)
        Material.query.filter(Material.id.in_(owned)).delete(synchronize_session=False)
    _commit()
    return len(owned)


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
