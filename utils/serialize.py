# utils/serialize.py
"""camelCase JSON views of the models, matching what the dashboard client reads."""
from decimal import Decimal


def _num(v):
    if v is None:
        return None
    if isinstance(v, Decimal):
        return int(v) if v == v.to_integral_value() else float(v)
    return v


def _ts(v):
    return v.isoformat() if v else None


def user_to_dict(u):
    return {
        "id": u.id,
        "email": u.email,
        "name": u.name,
        "role": u.role.value if u.role else None,
        "isVerified": bool(u.is_verified),
    }


def material_to_dict(m):
    return {
        "id": m.id,
        "code": m.code,
        "name": m.name,
        "description": m.description,
        "unit": m.unit,
        "category": m.category,
        "price": _num(m.price),
        "stock": _num(m.stock),
        "minStock": _num(m.min_stock),
        "status": m.status,
        "createdAt": _ts(m.created_at),
        "updatedAt": _ts(m.updated_at),
    }


def product_to_dict(p):
    return {
        "id": p.id,
        "sku": p.sku,
        "name": p.name,
        "description": p.description,
        "category": p.category,
        "price": _num(p.price),
        "stock": _num(p.stock),
        "minStock": _num(p.min_stock),
        "status": p.status,
        "createdAt": _ts(p.created_at),
        "updatedAt": _ts(p.updated_at),
    }


def history_to_dict(h):
    d = {
        "id": h.id,
        "materialId": h.material_id,
        "productId": h.product_id,
        "type": h.type.value,
        "quantity": _num(h.quantity),
        "description": h.description,
        "reference": h.reference,
        "userId": h.user_id,
        "createdAt": _ts(h.created_at),
        "material": None,
        "product": None,
    }
    if h.material is not None:
        d["material"] = {"code": h.material.code, "name": h.material.name, "unit": h.material.unit}
    if h.product is not None:
        d["product"] = {"sku": h.product.sku, "name": h.product.name}
    return d


def purchase_item_to_dict(it):
    d = {
        "id": it.id,
        "type": it.type,
        "materialId": it.material_id,
        "productId": it.product_id,
        "quantity": _num(it.quantity),
        "unit": it.unit,
        "price": _num(it.price),
        "totalPrice": _num(it.total_price),
        "material": None,
        "product": None,
    }
    if it.material is not None:
        d["material"] = {"code": it.material.code, "name": it.material.name, "unit": it.material.unit}
    if it.product is not None:
        d["product"] = {"sku": it.product.sku, "name": it.product.name}
    return d


def purchase_to_dict(p):
    return {
        "id": p.id,
        "invoiceNumber": p.invoice_number,
        "supplier": p.supplier,
        "reference": p.reference,
        "notes": p.notes,
        "orderType": p.order_type,
        "status": p.status.value,
        "discount": _num(p.discount),
        "subtotal": _num(p.subtotal),
        "total": _num(p.total),
        "autoUpdatePrice": bool(p.auto_update_price),
        "createdAt": _ts(p.created_at),
        "items": [purchase_item_to_dict(it) for it in p.items],
        "additionalCosts": [
            {"id": c.id, "description": c.description, "amount": _num(c.amount)}
            for c in p.additional_costs
        ],
    }
