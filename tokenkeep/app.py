"""
tokenkeep - API token issuance and audit engine
Application factory and initialization
"""
import logging
import os
import sys

import structlog
from flask import Flask

from tokenkeep.db import db, init_db
from tokenkeep.settings import load_settings
from tokenkeep.utils import ColoredFormatter


def configure_logging(level="INFO", log_format="console"):
    """Configure stdlib logging and structlog the same way for every entry point"""
    formatter = ColoredFormatter(
        '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if log_format == 'json' else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_app(config_overrides=None, config_file=None):
    """Build the Flask application that hosts the token engine"""
    settings = load_settings(config_file)
    configure_logging(settings["logging"]["level"], settings["logging"]["format"])
    logger = structlog.get_logger('main')

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = settings["database"]["uri"]
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["TOKENKEEP"] = settings
    if config_overrides:
        app.config.update(config_overrides)

    database_uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if database_uri.startswith("sqlite:///") and ":memory:" not in database_uri:
        os.makedirs(os.path.dirname(os.path.abspath(database_uri[len("sqlite:///"):])), exist_ok=True)

    db.init_app(app)
    init_db(app)

    logger.info("tokenkeep initialized", database=database_uri.split("://")[0])
    return app
