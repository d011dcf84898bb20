from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import json_body, not_found
from ..container import Container
from .service import public_view


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def login():
        body = json_body()
        user = container.user_service.authenticate(body.get("email", ""), body.get("password", ""))
        session["user_id"] = user["id"]
        session["role"] = user.get("role")
        return jsonify(user)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/users", methods=["GET"], endpoint="api_list_users")
    def list_users():
        limit = request.args.get("limit", default=100, type=int)
        return jsonify(container.user_service.list_accounts(limit=limit))

    @app.route("/api/users", methods=["POST"], endpoint="api_create_user")
    def create_user():
        body = json_body()
        password = body.pop("password", "")
        email = body.pop("email", "")
        role = body.pop("role", "employee")
        user = container.user_service.create_account(email=email, password=password, role=role, profile=body)
        return jsonify(user), 201

    @app.route("/api/users/<user_id>", methods=["GET"], endpoint="api_get_user")
    def get_user(user_id: str):
        user = container.users_repo.get_by_id(user_id)
        if not user:
            return not_found("User")
        return jsonify(public_view(user))

    @app.route("/api/users/<user_id>", methods=["PUT"], endpoint="api_update_user")
    def update_user(user_id: str):
        patch = json_body()
        user = container.user_service.update_account(user_id, patch, password=patch.get("password"))
        if not user:
            return not_found("User")
        return jsonify(user)

    @app.route("/api/users/<user_id>", methods=["DELETE"], endpoint="api_delete_user")
    def delete_user(user_id: str):
        if not container.users_repo.delete(user_id):
            return not_found("User")
        return jsonify({"success": True})
