# dao/stock_history.py
import math
from datetime import datetime, time
from typing import Optional

from dao.errors import ValidationError
from db.models.stock_history import MovementType, StockHistory


def _parse_day(value: str, field_name: str):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD", details={field_name: value})


def _positive_int(value, default: int, field_name: str) -> int:
    if value in (None, ""):
        return default
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", details={field_name: value})
    if n < 1:
        raise ValidationError(f"{field_name} must be at least 1", details={field_name: value})
    return n


def list_history(
    user_id: int,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    item_type: Optional[str] = None,
    movement: Optional[str] = None,
    material_id=None,
    product_id=None,
    page=None,
    limit=None,
    default_limit: int = 10,
):
    """Filtered, newest-first page of the user's ledger rows: (rows, meta)."""
    page = _positive_int(page, 1, "page")
    limit = _positive_int(limit, default_limit, "limit")

    q = StockHistory.query.filter(StockHistory.user_id == user_id)

    # both ends are required for the date filter, inclusive whole days
    if start_date and end_date:
        start = datetime.combine(_parse_day(start_date, "startDate"), time.min)
        end = datetime.combine(_parse_day(end_date, "endDate"), time.max)
        q = q.filter(StockHistory.created_at >= start, StockHistory.created_at <= end)

    if item_type == "material":
        q = q.filter(StockHistory.material_id.isnot(None), StockHistory.product_id.is_(None))
    elif item_type == "product":
        q = q.filter(StockHistory.product_id.isnot(None), StockHistory.material_id.is_(None))

    if movement and movement != "all":
        try:
            q = q.filter(StockHistory.type == MovementType(movement))
        except ValueError:
            raise ValidationError("Invalid type filter", details={"type": movement})

    try:
        if material_id:
            q = q.filter(StockHistory.material_id == int(material_id))
        if product_id:
            q = q.filter(StockHistory.product_id == int(product_id))
    except (TypeError, ValueError):
        raise ValidationError(
            "Invalid item id", details={"materialId": material_id, "productId": product_id}
        )

    total = q.order_by(None).count()
    rows = (
        q.order_by(StockHistory.created_at.desc(), StockHistory.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    meta = {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit),
    }
    return rows, meta


