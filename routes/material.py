from flask import Blueprint, jsonify, request
from flask_login import login_required

from dao import material as material_dao
from utils.auth import current_user_id
from utils.request_json import json_body
from utils.serialize import material_to_dict

material_bp = Blueprint("material_api", __name__, url_prefix="/api/materials")


@material_bp.route("", methods=["GET"])
@login_required
def materials_list():
    materials = material_dao.list_materials(current_user_id())
    return jsonify([material_to_dict(m) for m in materials])


@material_bp.route("", methods=["POST"])
@login_required
def materials_add():
    m = material_dao.create_material(current_user_id(), json_body())
    return jsonify(material_to_dict(m)), 201


@material_bp.route("/check-code")
@login_required
def materials_check_code():
    code = request.args.get("code", "")
    return jsonify({"exists": bool(code) and material_dao.code_exists(code, current_user_id())})


@material_bp.route("/bulk-delete", methods=["POST"])
@login_required
def materials_bulk_delete():
    count = material_dao.bulk_delete(json_body().get("ids"), current_user_id())
    return jsonify({"message": f"Successfully deleted {count} materials", "count": count})


@material_bp.route("/<int:material_id>", methods=["GET"])
@login_required
def materials_get(material_id: int):
    return jsonify(material_to_dict(material_dao.require_material(material_id, current_user_id())))


@material_bp.route("/<int:material_id>", methods=["PUT"])
@login_required
def materials_edit(material_id: int):
    m = material_dao.update_material(material_id, current_user_id(), json_body())
    return jsonify(material_to_dict(m))


@material_bp.route("/<int:material_id>/status", methods=["PATCH"])
@login_required
def materials_status(material_id: int):
    m = material_dao.set_status(material_id, current_user_id(), json_body().get("status"))
    return jsonify(material_to_dict(m))


@material_bp.route("/<int:material_id>", methods=["DELETE"])
@login_required
def materials_delete(material_id: int):
    material_dao.delete_material(material_id, current_user_id())
    return jsonify({"message": "Material deleted successfully"})
