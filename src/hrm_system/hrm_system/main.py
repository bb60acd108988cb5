from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BalanceInconsistency,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .leave.controller import register as register_leave
from .shifts.controller import register as register_shifts
from .summaries.controller import register as register_summaries

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).resolve().parents[3]

# Input that is well-formed but conflicts with current state.
_CONFLICT_CODES = {
    "OverlappingRequest",
    "RequestNotPending",
    "NotCurrentApprover",
    "DuplicateCheckIn",
    "DuplicateCheckOut",
    "AlreadyCheckedOut",
    "BreakAlreadyOpen",
    "NoOpenBreak",
    "InsufficientBalance",
    "OverlappingAssignment",
}


def _status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, ValidationError):
        return 409 if exc.code in _CONFLICT_CODES else 422
    return 500


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if isinstance(exc, BalanceInconsistency):
            logger.error("Balance inconsistency: %s %s", exc.message, exc.context)
        return jsonify(exc.to_dict()), _status_for(exc)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.name, "message": exc.description, "context": {}}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error")
        return jsonify({"error": "InternalError", "message": "Internal server error", "context": {}}), 500


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module, db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=_ROOT / "database" / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=_ROOT / "database" / "seed.sql")

        container = build_container(
            db_config=db_config,
            approval_levels=int(getattr(settings, "LEAVE_APPROVAL_LEVELS", 1)),
            max_chain_depth=int(getattr(settings, "MAX_MANAGEMENT_CHAIN_DEPTH", 10)),
            weekend_days=tuple(getattr(settings, "WEEKEND_DAYS", (5, 6))),
            standard_workday_minutes=int(getattr(settings, "STANDARD_WORKDAY_MINUTES", 480)),
            strict_balance_release=bool(getattr(settings, "STRICT_BALANCE_RELEASE", False)),
        )

    app.extensions["hrm_container"] = container
    register_error_handlers(app)
    register_leave(app, container)
    register_attendance(app, container)
    register_summaries(app, container)
    register_shifts(app, container)

    return app
