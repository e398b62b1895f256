from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .database.connection import DBConfig
from .packages.controller import register as register_packages
from .scheduling.controller import register as register_scheduling
from .scheduling.layout import GridConfig

logger = logging.getLogger("driving_school")


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.debug("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

    db_dir = Path(__file__).resolve().parents[3] / "database"
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=db_dir / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=db_dir / "seed.sql")
        logger.info("Demo seed ready")

    grid = GridConfig(
        start_hour=int(getattr(settings, "GRID_START_HOUR", 7)),
        end_hour=int(getattr(settings, "GRID_END_HOUR", 22)),
        row_height=int(getattr(settings, "ROW_HEIGHT", 80)),
    )
    container = build_container(db_config=db_config, grid=grid)

    register_scheduling(app, container)
    register_packages(app, container)

    return app
