from flask import Blueprint, jsonify, request
from flask_login import login_required

from dao import product as product_dao
from utils.auth import current_user_id
from utils.request_json import json_body
from utils.serialize import product_to_dict

product_bp = Blueprint("product_api", __name__, url_prefix="/api/products")


@product_bp.route("", methods=["GET"])
@login_required
def products_list():
    products = product_dao.list_products(current_user_id())
    return jsonify([product_to_dict(p) for p in products])


@product_bp.route("", methods=["POST"])
@login_required
def products_add():
    p = product_dao.create_product(current_user_id(), json_body())
    return jsonify(product_to_dict(p)), 201


@product_bp.route("/check-sku")
@login_required
def products_check_sku():
    sku = request.args.get("sku", "")
    return jsonify({"exists": bool(sku) and product_dao.sku_exists(sku, current_user_id())})


@product_bp.route("/bulk-delete", methods=["POST"])
@login_required
def products_bulk_delete():
    count = product_dao.bulk_delete(json_body().get("ids"), current_user_id())
    return jsonify({"message": f"Successfully deleted {count} products", "count": count})


@product_bp.route("/<int:product_id>", methods=["GET"])
@login_required
def products_get(product_id: int):
    return jsonify(product_to_dict(product_dao.require_product(product_id, current_user_id())))


@product_bp.route("/<int:product_id>", methods=["PUT"])
@login_required
def products_edit(product_id: int):
    p = product_dao.update_product(product_id, current_user_id(), json_body())
    return jsonify(product_to_dict(p))


@product_bp.route("/<int:product_id>/status", methods=["PATCH"])
@login_required
def products_status(product_id: int):
    p = product_dao.set_status(product_id, current_user_id(), json_body().get("status"))
    return jsonify(product_to_dict(p))


@product_bp.route("/<int:product_id>", methods=["DELETE"])
@login_required
def products_delete(product_id: int):
    product_dao.delete_product(product_id, current_user_id())
    return jsonify({"message": "Product deleted successfully"})
