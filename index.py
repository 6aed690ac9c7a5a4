# index.py
from decimal import Decimal

from flask import Blueprint, jsonify
from flask_login import login_required

from db.models.material import Material
from db.models.product import Product
from db.models.purchase import Purchase, PurchaseStatus
from utils.auth import current_user_id
from utils.serialize import material_to_dict, product_to_dict

main_bp = Blueprint("main", __name__)


def _stock_value(items) -> float:
    return float(sum((Decimal(str(i.stock)) * Decimal(str(i.price)) for i in items), Decimal(0)))


@main_bp.route("/api/dashboard")
@login_required
def home():
    user_id = current_user_id()
    materials = Material.query.filter_by(user_id=user_id).all()
    products = Product.query.filter_by(user_id=user_id).all()
    pending = Purchase.query.filter_by(user_id=user_id, status=PurchaseStatus.PENDING).count()

    return jsonify(
        {
            "materials": len(materials),
            "products": len(products),
            "pendingPurchases": pending,
            "stockValue": round(_stock_value(materials) + _stock_value(products), 2),
            "lowStock": {
                "materials": [material_to_dict(m) for m in materials if m.stock <= m.min_stock],
                "products": [product_to_dict(p) for p in products if p.stock <= p.min_stock],
            },
        }
    )
