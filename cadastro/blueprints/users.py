# cadastro/blueprints/users.py
from flask import Blueprint, current_app, jsonify, request

from ..services.user_service import UserService

bp = Blueprint("users", __name__)

HTTP_CREATED = 201
HTTP_ACCEPTED = 202

def _svc() -> UserService:
    return current_app.extensions["user_service"]

@bp.route("/users", methods=["GET"])
def list_users():
    args = request.args
    limit = args.get("limit", args.get("users"))  # "users" é o nome antigo
    page = _svc().list_users(args.get("page"), limit, args.get("sort"))
    return jsonify(page.to_dict()), HTTP_ACCEPTED

@bp.route("/users/all", methods=["GET"])
def list_users_legacy():
    args = request.args
    page = _svc().list_users(args.get("page"), args.get("users"), sort_first=False)
    return jsonify(page.to_dict()), HTTP_ACCEPTED

@bp.route("/users", methods=["POST"])
@bp.route("/users/create", methods=["POST"])
def create_user():
    user = _svc().create_user(request.get_json(silent=True))
    return jsonify(user.to_dict()), HTTP_CREATED

@bp.route("/users/<cpf>", methods=["GET"])
@bp.route("/users/<cpf>/find-by-cpf", methods=["GET"])
def find_by_cpf(cpf: str):
    user = _svc().find_by_cpf(cpf)
    return jsonify(user.to_dict()), HTTP_ACCEPTED

@bp.route("/users/<user_id>", methods=["DELETE"])
@bp.route("/users/<user_id>/delete", methods=["DELETE"])
def delete_user(user_id: str):
    message = _svc().delete_user(user_id)
    return jsonify({"message": message}), HTTP_ACCEPTED

@bp.route("/users/<user_id>", methods=["PUT"])
def update_user(user_id: str):
    user = _svc().update_user(user_id, request.get_json(silent=True))
    return jsonify(user.to_dict()), HTTP_CREATED
