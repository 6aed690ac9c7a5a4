# routes/stock_history.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required

from dao import stock_history as history_dao
from dao.ledger import item_ref
from dao.stock_store import current_ledger
from utils.auth import current_user_id
from utils.request_json import json_body
from utils.serialize import history_to_dict

stock_history_bp = Blueprint("stock_history_api", __name__, url_prefix="/api/stock-history")


@stock_history_bp.route("", methods=["GET"])
@login_required
def history_list():
    args = request.args
    rows, meta = history_dao.list_history(
        current_user_id(),
        start_date=args.get("startDate"),
        end_date=args.get("endDate"),
        item_type=args.get("itemType"),
        movement=args.get("type"),
        material_id=args.get("materialId"),
        product_id=args.get("productId"),
        page=args.get("page"),
        limit=args.get("limit"),
        default_limit=current_app.config["STOCK_HISTORY_PAGE_SIZE"],
    )
    return jsonify({"data": [history_to_dict(h) for h in rows], "meta": meta})


@stock_history_bp.route("", methods=["POST"])
@login_required
def history_apply():
    user_id = current_user_id()
    body = json_body()
    row = current_ledger().apply(
        item_ref(body.get("materialId"), body.get("productId")),
        body.get("type"),
        body.get("quantity"),
        user_id,
        description=body.get("description"),
        reference=body.get("reference"),
    )
    return jsonify(history_to_dict(row)), 201
