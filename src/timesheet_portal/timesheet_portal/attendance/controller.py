from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from ..container import Container
from ..core.enums import FileKind, ReviewStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    OperationTimeout,
    ValidationError,
)
from .model import AttendanceSubmission, UploadedFile
from .query import parse_filter, parse_page, parse_sort

logger = logging.getLogger(__name__)

_HTTP_STATUS = {
    ValidationError: 400,
    AuthorizationError: 403,
    NotFoundError: 404,
    InvalidTransitionError: 409,
    OperationTimeout: 504,
}


def _to_upload(storage: Optional[FileStorage]) -> Optional[UploadedFile]:
    if storage is None or not storage.filename:
        return None
    data = storage.read()
    return UploadedFile(filename=storage.filename, content_type=storage.mimetype, size=len(data), data=data)


def _current_role() -> Role:
    raw = session.get("role")
    if isinstance(raw, int) and not isinstance(raw, bool):
        try:
            return Role.from_user_type(raw)
        except ValueError:
            raise AuthorizationError("Unknown role", field="role") from None
    try:
        return Role(str(raw).lower())
    except ValueError:
        raise AuthorizationError("Unknown role", field="role") from None


def _parse_target_status(raw) -> ReviewStatus:
    if isinstance(raw, int) and not isinstance(raw, bool):
        try:
            return ReviewStatus.from_code(raw)
        except ValueError:
            pass
    elif isinstance(raw, str):
        try:
            return ReviewStatus(raw.strip().upper())
        except ValueError:
            pass
    raise ValidationError("status must be APPROVED or REJECTED", field="status")


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"error": "unauthenticated", "field": None, "reason": "Please sign in"}), 401
            return view(*args, **kwargs)

        return wrapper

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify(e.to_dict()), _HTTP_STATUS.get(type(e), 400)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e: RequestEntityTooLarge):
        return jsonify({"error": "validation", "field": "file", "reason": "File must not exceed 20MB"}), 413

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"error": "http", "field": None, "reason": e.description}), e.code
        logger.exception("unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "internal", "field": None, "reason": "Internal error, please retry later"}), 500

    @app.route("/attendance", methods=["POST"], endpoint="submit_attendance")
    @login_required
    def submit_attendance():
        submission = AttendanceSubmission(
            month=request.form.get("month"),
            work_hours=request.form.get("work_hours"),
            transportation_fee=request.form.get("transportation_fee"),
            attendance_file=_to_upload(request.files.get("file") or request.files.get("attendance_file")),
            transportation_file=_to_upload(request.files.get("transportation_file")),
            comments=request.form.get("comments"),
        )
        record_id = service.submit(
            owner_id=int(session["user_id"]),
            owner_name=session.get("name"),
            submission=submission,
            idempotency_key=request.headers.get("Idempotency-Key"),
        )
        return jsonify({"id": record_id, "message": "Timesheet uploaded"}), 201

    @app.route("/attendance", methods=["GET"], endpoint="list_attendance")
    @login_required
    def list_attendance():
        args = request.args
        owner_id = int(session["user_id"]) if args.get("mine") in {"1", "true"} else None
        result = service.list(
            caller_id=int(session["user_id"]),
            role=_current_role(),
            criteria=parse_filter(month=args.get("month"), status=args.get("status"), owner_id=owner_id),
            sort=parse_sort(args.get("sort_by"), args.get("direction")),
            page=parse_page(args.get("page"), args.get("page_size")),
        )
        return jsonify(result.to_dict())

    @app.route("/attendance/<int:record_id>", methods=["GET"], endpoint="get_attendance")
    @login_required
    def get_attendance(record_id: int):
        return jsonify(service.get(record_id).to_dict())

    @app.route("/attendance/<int:record_id>/files/<which>", methods=["GET"], endpoint="attendance_file")
    @login_required
    def attendance_file(record_id: int, which: str):
        try:
            kind = FileKind(which)
        except ValueError:
            raise ValidationError("File must be attendance or transportation", field="which") from None
        return jsonify({"id": record_id, "which": kind.value, "file_ref": service.download(record_id, kind)})

    @app.route("/attendance/<int:record_id>", methods=["DELETE"], endpoint="delete_attendance")
    @login_required
    def delete_attendance(record_id: int):
        service.remove(record_id, caller_id=int(session["user_id"]))
        return jsonify({"message": "Timesheet deleted"})

    @app.route("/attendance/<int:record_id>/review", methods=["POST"], endpoint="review_attendance")
    @login_required
    def review_attendance(record_id: int):
        payload = request.get_json(silent=True)
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object", field="body")
        record = service.review(
            record_id,
            caller_id=int(session["user_id"]),
            role=_current_role(),
            target_status=_parse_target_status(payload.get("status")),
            comments=payload.get("comments"),
            idempotency_key=request.headers.get("Idempotency-Key"),
        )
        return jsonify(record.to_dict())
