from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .biometrics.controller import register as register_biometrics
from .common.http import register_error_handlers
from .container import build_container, build_store
from .core.constants import DEFAULT_MAX_INDEX_SIZE
from .database.bootstrap import apply_kv_schema, list_tables
from .database.kv_store import KeyValueStore
from .employees.controller import register as register_employees
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger("pointage")
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


def create_app(*, store: KeyValueStore | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    backend = getattr(settings, "STORE_BACKEND", "memory")
    db_config = getattr(settings, "DB_CONFIG", None)
    logger.info("settings=%s store=%s", settings_module, "injected" if store is not None else backend)

    if store is None:
        if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_kv_schema(db_config)
            logger.info("kv schema ready (tables=%d)", len(list_tables(db_config)))
        store = build_store(backend=backend, db_config=db_config)

    container = build_container(store=store, max_index_size=int(getattr(settings, "MAX_INDEX_SIZE", DEFAULT_MAX_INDEX_SIZE)))
    app.extensions["pointage"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_employees(app, container)
    register_attendance(app, container)
    register_biometrics(app, container)

    return app
