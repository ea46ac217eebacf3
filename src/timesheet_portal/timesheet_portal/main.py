from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .core.constants import DEFAULT_IO_TIMEOUT_SECONDS, MAX_UPLOAD_BYTES
from .database.bootstrap import apply_schema

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings_module: str | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    # Room for two 20MB files plus the form fields.
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_CONTENT_LENGTH", 2 * MAX_UPLOAD_BYTES + 1024 * 1024))

    storage_backend = str(getattr(settings, "STORAGE_BACKEND", "memory"))
    db_config = getattr(settings, "DB_CONFIG", None)
    logger.info("settings=%s storage=%s", settings_module, storage_backend)

    if storage_backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)

    container = build_container(
        storage_backend=storage_backend,
        db_config=db_config,
        upload_dir=getattr(settings, "UPLOAD_DIR", "uploads"),
        io_timeout=getattr(settings, "IO_TIMEOUT_SECONDS", DEFAULT_IO_TIMEOUT_SECONDS),
    )
    app.extensions["timesheet_portal"] = container

    register_attendance(app, container)

    return app
