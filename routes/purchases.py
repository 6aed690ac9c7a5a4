# routes/purchases.py
from flask import Blueprint, jsonify
from flask_login import login_required

from dao import purchase as purchase_dao
from dao.stock_store import current_ledger
from utils.auth import current_user_id
from utils.request_json import json_body
from utils.serialize import purchase_to_dict

purchase_bp = Blueprint("purchase_api", __name__, url_prefix="/api/purchases")


@purchase_bp.route("", methods=["GET"])
@login_required
def purchases_list():
    purchases = purchase_dao.list_purchases(current_user_id())
    return jsonify([purchase_to_dict(p) for p in purchases])


@purchase_bp.route("", methods=["POST"])
@login_required
def purchases_add():
    """
    Create a purchase. With status "completed" its lines go into stock
    in the same transaction.
    """
    po = purchase_dao.create_purchase(current_ledger(), current_user_id(), json_body())
    return jsonify({"success": True, "data": purchase_to_dict(po)}), 201


@purchase_bp.route("/suppliers")
@login_required
def purchases_suppliers():
    return jsonify(purchase_dao.list_suppliers(current_user_id()))


@purchase_bp.route("/bulk-delete", methods=["POST"])
@login_required
def purchases_bulk_delete():
    ids = json_body().get("ids")
    deleted, reverted = current_ledger().bulk_delete_purchases(ids, current_user_id())
    return jsonify(
        {
            "message": f"Successfully deleted {deleted} purchases, "
            f"reverted stock for {reverted} completed purchases",
            "count": deleted,
            "completedCount": reverted,
        }
    )


@purchase_bp.route("/<int:purchase_id>", methods=["GET"])
@login_required
def purchases_get(purchase_id: int):
    po = purchase_dao.require_owned(purchase_id, current_user_id())
    return jsonify(purchase_to_dict(po))


@purchase_bp.route("/<int:purchase_id>/status", methods=["PATCH"])
@login_required
def purchases_status(purchase_id: int):
    po = purchase_dao.update_status(
        current_ledger(), purchase_id, current_user_id(), json_body().get("status")
    )
    return jsonify({"success": True, "data": purchase_to_dict(po)})


@purchase_bp.route("/<int:purchase_id>", methods=["DELETE"])
@login_required
def purchases_delete(purchase_id: int):
    purchase_dao.delete_purchase(current_ledger(), purchase_id, current_user_id())
    return jsonify({"success": True})
