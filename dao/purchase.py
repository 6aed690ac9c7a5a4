# dao/purchase.py
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy import func

from configs import db
from dao.errors import Forbidden, NotFoundError, ValidationError
from dao.ledger import MaterialRef, ProductRef, PurchaseReversal, StockLedger
from dao.stock_store import model_for, purchase_lines
from db.models.material import Material
from db.models.product import Product
from db.models.purchase import (
    Purchase,
    PurchaseAdditionalCost,
    PurchaseItem,
    PurchaseStatus,
)
from db.models.stock_history import MovementType

ITEM_TYPES = ("material", "product")


def _dec(x) -> Decimal:
    return Decimal(str(x or 0))


def _money(value, field_name: str) -> Decimal:
    """Non-negative amount from the request body; missing means 0."""
    if value is None or value == "":
        return Decimal(0)
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", details={field_name: value})
    try:
        n = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number", details={field_name: value})
    if not n.is_finite() or n < 0:
        raise ValidationError(
            f"{field_name} must be a non-negative number", details={field_name: value}
        )
    return n


def _to_status(value) -> PurchaseStatus:
    s = (value or "").strip().lower() if isinstance(value, str) else value
    if not s:
        return PurchaseStatus.PENDING
    try:
        return PurchaseStatus(s)
    except ValueError:
        raise ValidationError(
            "Invalid status. Must be one of: "
            + ", ".join(st.value for st in PurchaseStatus),
            details={"status": value},
        )


def _parse_created_at(date: Optional[str], time: Optional[str]) -> datetime:
    if date and time:
        try:
            return datetime.fromisoformat(f"{date}T{time}")
        except ValueError:
            raise ValidationError("Invalid date/time", details={"date": date, "time": time})
    return datetime.utcnow()


# ---------------- queries ----------------
def list_purchases(user_id: int) -> List[Purchase]:
    return (
        Purchase.query.filter_by(user_id=user_id)
        .order_by(Purchase.created_at.desc(), Purchase.id.desc())
        .all()
    )


def get_purchase(purchase_id: int) -> Optional[Purchase]:
    return db.session.get(Purchase, purchase_id)


def require_owned(purchase_id: int, user_id: int) -> Purchase:
    p = get_purchase(purchase_id)
    if not p:
        raise NotFoundError("Purchase not found")
    if p.user_id != user_id:
        raise Forbidden("You do not have permission to access this purchase")
    return p


def list_suppliers(user_id: int) -> List[str]:
    rows = (
        db.session.query(Purchase.supplier)
        .filter(Purchase.user_id == user_id)
        .distinct()
        .order_by(Purchase.supplier.asc())
        .all()
    )
    return [s for (s,) in rows if s]


def generate_invoice_number(now: Optional[datetime] = None) -> str:
    """INV/PO/YYMMDD/NNN, NNN = purchases created today + 1."""
    now = now or datetime.utcnow()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    count = (
        db.session.query(func.count(Purchase.id))
        .filter(Purchase.created_at >= start, Purchase.created_at < start + timedelta(days=1))
        .scalar()
    )
    return f"INV/PO/{now:%y%m%d}/{count + 1:03d}"


# ---------------- validation ----------------
def _normalize_items(items, user_id: int) -> List[dict]:
    if not isinstance(items, list) or not items:
        raise ValidationError("Items must be a non-empty array")

    normalized = []
    for idx, it in enumerate(items, 1):
        if not isinstance(it, dict):
            raise ValidationError(f"Item {idx}: must be an object")
        kind = it.get("type")
        if kind not in ITEM_TYPES:
            raise ValidationError(
                f"Invalid item type: {kind}. Must be either 'material' or 'product'"
            )
        raw_id = it.get("materialId") if kind == "material" else it.get("productId")
        if raw_id in (None, ""):
            raise ValidationError(
                f"{kind.capitalize()} items must have a {kind}Id"
            )
        try:
            ref = MaterialRef(int(raw_id)) if kind == "material" else ProductRef(int(raw_id))
        except (TypeError, ValueError):
            raise ValidationError(f"Item {idx}: invalid {kind}Id", details={"received": raw_id})
        model = model_for(ref)
        if not model.query.filter_by(id=ref.id, user_id=user_id).one_or_none():
            raise ValidationError(f"{kind.capitalize()} with ID {ref.id} not found")

        qty, price = it.get("quantity"), it.get("price")
        if isinstance(qty, bool) or not isinstance(qty, (int, float)) or qty <= 0:
            raise ValidationError("Each item must have a valid quantity greater than 0")
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0:
            raise ValidationError("Each item must have a valid price")

        total_price = _money(it.get("totalPrice"), "totalPrice")
        normalized.append(
            {
                "ref": ref,
                "type": kind,
                "quantity": _dec(qty),
                "price": _dec(price),
                "unit": it.get("unit") or "pcs",
                "total_price": total_price or _dec(qty) * _dec(price),
            }
        )
    return normalized


def _normalize_costs(costs) -> List[dict]:
    if not isinstance(costs, list):
        return []
    out = []
    for c in costs:
        if not isinstance(c, dict):
            raise ValidationError("Additional cost amount must be a number")
        out.append(
            {"description": c.get("description"), "amount": _money(c.get("amount"), "amount")}
        )
    return out


# ---------------- stock side effects ----------------
def _weighted_prices(purchase: Purchase) -> None:
    """
    New price per item = weighted average of current stock at current price and
    purchased quantities at price + additional cost per unit.
    Must run before stock is incremented; item rows are locked and re-read
    so the average uses the committed stock.
    """
    total_qty = sum((_dec(it.quantity) for it in purchase.items), Decimal(0))
    total_costs = sum((_dec(c.amount) for c in purchase.additional_costs), Decimal(0))
    extra_per_unit = total_costs / total_qty if total_qty else Decimal(0)

    grouped = defaultdict(list)
    for it in purchase.items:
        if it.type == "material" and it.material_id:
            grouped[(Material, it.material_id)].append(it)
        elif it.type == "product" and it.product_id:
            grouped[(Product, it.product_id)].append(it)

    for (model, item_id), lines in grouped.items():
        item = (
            db.session.query(model)
            .filter(model.id == item_id, model.user_id == purchase.user_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )
        if item is None:
            continue
        value = _dec(item.stock) * _dec(item.price)
        qty = _dec(item.stock)
        for ln in lines:
            value += _dec(ln.quantity) * (_dec(ln.price) + extra_per_unit)
            qty += _dec(ln.quantity)
        if qty > 0:
            item.price = (value / qty).quantize(Decimal("0.01"))


def _receive(ledger: StockLedger, tx, purchase: Purchase, user_id: int) -> None:
    if purchase.auto_update_price:
        _weighted_prices(purchase)
    for ref, qty in purchase_lines(purchase):
        ledger.record(
            tx,
            ref,
            MovementType.IN,
            qty,
            user_id,
            description=f"Purchase completed: {purchase.label}",
            reference=purchase.invoice_number or "",
        )


def _take_back(ledger: StockLedger, tx, purchase: Purchase, user_id: int) -> None:
    reversal = PurchaseReversal(
        purchase_id=purchase.id, label=purchase.label, lines=purchase_lines(purchase)
    )
    ledger.reverse_completed_purchase(
        tx,
        reversal,
        user_id,
        description=f"Purchase cancelled: {purchase.label}",
        reference=purchase.invoice_number or "",
    )


# ---------------- mutations ----------------
def create_purchase(ledger: StockLedger, user_id: int, body) -> Purchase:
    if not isinstance(body, dict):
        raise ValidationError("Invalid request body - must be an object")
    missing = [f for f in ("supplier", "items") if not body.get(f)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    items = _normalize_items(body["items"], user_id)
    costs = _normalize_costs(body.get("additionalCosts"))
    status = _to_status(body.get("status"))

    subtotal = _money(body.get("subtotal"), "subtotal") or sum(
        (it["total_price"] for it in items), Decimal(0)
    )
    discount = _money(body.get("discount"), "discount")
    total = _money(body.get("total"), "total") or (
        subtotal - discount + sum((c["amount"] for c in costs), Decimal(0))
    )

    def run(tx):
        session = tx.session
        purchase = Purchase(
            invoice_number=body.get("invoiceNumber") or generate_invoice_number(),
            supplier=str(body["supplier"]).strip(),
            reference=body.get("reference") or "",
            notes=body.get("notes") or "",
            order_type=body.get("orderType") or "offline",
            status=status,
            discount=discount,
            subtotal=subtotal,
            total=total,
            auto_update_price=bool(body.get("autoUpdatePrice")),
            user_id=user_id,
            created_at=_parse_created_at(body.get("date"), body.get("time")),
        )
        for it in items:
            ref = it["ref"]
            purchase.items.append(
                PurchaseItem(
                    type=it["type"],
                    material_id=ref.id if isinstance(ref, MaterialRef) else None,
                    product_id=ref.id if isinstance(ref, ProductRef) else None,
                    quantity=it["quantity"],
                    unit=it["unit"],
                    price=it["price"],
                    total_price=it["total_price"],
                )
            )
        for c in costs:
            purchase.additional_costs.append(PurchaseAdditionalCost(**c))
        session.add(purchase)
        session.flush()  # need purchase.id and item ids

        if status == PurchaseStatus.COMPLETED:
            _receive(ledger, tx, purchase, user_id)
        return purchase

    return ledger.store.with_transaction(run)


def update_status(ledger: StockLedger, purchase_id: int, user_id: int, status) -> Purchase:
    if not status or not isinstance(status, str):
        raise ValidationError("Status is required and must be a string")
    new_status = _to_status(status)
    require_owned(purchase_id, user_id)

    def run(tx):
        purchase = tx.session.get(Purchase, purchase_id)
        old_status = purchase.status
        purchase.status = new_status
        if new_status == PurchaseStatus.COMPLETED and old_status != PurchaseStatus.COMPLETED:
            _receive(ledger, tx, purchase, user_id)
        elif old_status == PurchaseStatus.COMPLETED and new_status != PurchaseStatus.COMPLETED:
            _take_back(ledger, tx, purchase, user_id)
        return purchase

    return ledger.store.with_transaction(run)


def delete_purchase(ledger: StockLedger, purchase_id: int, user_id: int) -> None:
    require_owned(purchase_id, user_id)
    ledger.bulk_delete_purchases([purchase_id], user_id)
