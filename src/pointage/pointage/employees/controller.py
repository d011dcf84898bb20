from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_body, not_found
from ..container import Container


def register(app: Flask, container: Container) -> None:
    repo = container.employees_repo

    @app.route("/api/employees", methods=["GET"], endpoint="api_list_employees")
    def list_employees():
        query = request.args.get("q", "")
        return jsonify(repo.search(query))

    @app.route("/api/employees", methods=["POST"], endpoint="api_create_employee")
    def create_employee():
        return jsonify(repo.create(json_body())), 201

    @app.route("/api/employees/<employee_id>", methods=["GET"], endpoint="api_get_employee")
    def get_employee(employee_id: str):
        employee = repo.get_by_id(employee_id)
        if not employee:
            return not_found("Employee")
        return jsonify(employee)

    @app.route("/api/employees/<employee_id>", methods=["PUT"], endpoint="api_update_employee")
    def update_employee(employee_id: str):
        employee = repo.update(employee_id, json_body())
        if not employee:
            return not_found("Employee")
        return jsonify(employee)

    @app.route("/api/employees/<employee_id>", methods=["DELETE"], endpoint="api_delete_employee")
    def delete_employee(employee_id: str):
        if not repo.delete(employee_id):
            return not_found("Employee")
        container.biometrics_repo.delete_for_employee(employee_id)
        return jsonify({"success": True})

    @app.route("/api/departments/<department_id>/employees", methods=["GET"], endpoint="api_department_employees")
    def department_employees(department_id: str):
        return jsonify(repo.get_by_department(department_id))
