from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body, not_found
from ..common.validators import require_choice
from ..container import Container
from ..core.enums import BiometricType


def register(app: Flask, container: Container) -> None:
    repo = container.biometrics_repo
    known_types = {t.value for t in BiometricType}

    @app.route("/api/biometrics/register", methods=["POST"], endpoint="api_register_biometric")
    def register_biometric():
        body = json_body()
        require_choice(body.get("type"), "type", known_types)
        if not container.employees_repo.get_by_id(str(body.get("employeeId") or "")):
            return not_found("Employee")
        record = repo.save(body)
        return jsonify({"success": True, "id": record["id"]})

    @app.route("/api/biometrics/<employee_id>", methods=["GET"], endpoint="api_employee_biometrics")
    def employee_biometrics(employee_id: str):
        return jsonify(repo.get_by_employee(employee_id))

    @app.route("/api/biometrics/<employee_id>/<biometric_type>", methods=["GET"], endpoint="api_get_biometric")
    def get_biometric(employee_id: str, biometric_type: str):
        record = repo.get_by_employee_and_type(employee_id, biometric_type)
        if not record:
            return not_found("Biometric record")
        return jsonify(record)

    @app.route("/api/biometrics/<employee_id>/<biometric_type>", methods=["DELETE"], endpoint="api_delete_biometric")
    def delete_biometric(employee_id: str, biometric_type: str):
        if not repo.delete(employee_id, biometric_type):
            return not_found("Biometric record")
        return jsonify({"success": True})
