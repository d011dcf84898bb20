from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_utc, to_day_key
from ..common.http import error_response, json_body, not_found
from ..container import Container


def register(app: Flask, container: Container) -> None:
    repo = container.attendance_repo

    @app.route("/api/attendance", methods=["GET"], endpoint="api_list_attendance")
    def list_attendance():
        """By day (defaults to today), optionally for one employee or a date range."""
        employee_id = request.args.get("employeeId")
        start = request.args.get("start")
        end = request.args.get("end")

        if start or end:
            if not (employee_id and start and end):
                return error_response("employeeId, start and end are required for a range", 400)
            return jsonify(repo.get_by_employee_and_date_range(employee_id, start, end))

        day = request.args.get("date") or to_day_key(now_utc())
        if employee_id:
            return jsonify(repo.get_by_employee_and_date(employee_id, day))
        return jsonify(repo.get_by_date(day))

    @app.route("/api/attendance", methods=["POST"], endpoint="api_create_attendance")
    def create_attendance():
        return jsonify(repo.create(json_body())), 201

    @app.route("/api/attendance/<attendance_id>", methods=["GET"], endpoint="api_get_attendance")
    def get_attendance(attendance_id: str):
        record = repo.get_by_id(attendance_id)
        if not record:
            return not_found("Attendance record")
        return jsonify(record)

    @app.route("/api/attendance/<attendance_id>", methods=["PUT"], endpoint="api_update_attendance")
    def update_attendance(attendance_id: str):
        record = repo.update(attendance_id, json_body())
        if not record:
            return not_found("Attendance record")
        return jsonify(record)

    @app.route("/api/attendance/<attendance_id>", methods=["DELETE"], endpoint="api_delete_attendance")
    def delete_attendance(attendance_id: str):
        if not repo.delete(attendance_id):
            return not_found("Attendance record")
        return jsonify({"success": True})
