# siteaudit/__init__.py
"""
App factory for the site audit scan service.

    - CORS origins read from CORS_ORIGINS env var (comma-separated)
    - An https:// CORS origin switches to production logging levels
    - Scanner timeouts read from SCAN_* env vars into app.config["SCANNER_CONFIG"]
    - JSON 404/405/500 handlers; tracebacks are logged, never returned
"""

from __future__ import annotations

import logging
import os
import re
import traceback
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from .scan import scan_bp

error_logger = logging.getLogger("siteaudit.errors")


def _is_production() -> bool:
    """Detect production by checking CORS_ORIGINS for https."""
    return os.getenv("CORS_ORIGINS", "").startswith("https://")


def _env_float(name: str) -> Optional[float]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning(f"Ignoring {name}={raw!r}: not a number")
        return None


def scanner_config_from_env() -> Dict[str, Dict[str, Any]]:
    """Per-tag scanner config built from the SCAN_* environment variables."""
    page_timeout = _env_float("SCAN_PAGE_TIMEOUT")
    script_timeout = _env_float("SCAN_SCRIPT_TIMEOUT")
    header_timeout = _env_float("SCAN_HEADER_TIMEOUT")

    configs: Dict[str, Dict[str, Any]] = {"security": {}, "api_keys": {}, "seo": {}}
    if header_timeout is not None:
        configs["security"]["timeout"] = header_timeout
    if page_timeout is not None:
        configs["api_keys"]["page_timeout"] = page_timeout
        configs["seo"]["page_timeout"] = page_timeout
    if script_timeout is not None:
        configs["api_keys"]["script_timeout"] = script_timeout
    return configs


def _configure_logging(app: Flask, is_prod: bool) -> None:
    level = logging.INFO if is_prod else logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S" if is_prod else "%H:%M:%S",
    )
    app.logger.setLevel(level)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    # Quieten noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _cors_origins() -> List[Any]:
    cors_env = os.getenv("CORS_ORIGINS")
    if cors_env:
        return [o.strip() for o in cors_env.split(",") if o.strip()]
    return [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        re.compile(r"http://192\.168\.\d+\.\d+:3000"),
    ]


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)

    _configure_logging(app, _is_production())

    CORS(app, resources={
        r"/*": {
            "origins": _cors_origins(),
            "allow_headers": ["Content-Type"],
            "methods": ["GET", "POST", "OPTIONS"],
        }
    })

    app.config["SCANNER_CONFIG"] = scanner_config_from_env()
    # Tests inject a prebuilt ScanOrchestrator here
    app.config["SCAN_ORCHESTRATOR"] = None
    if config:
        app.config.update(config)

    app.register_blueprint(scan_bp)

    # Request validation errors are answered by the blueprint itself
    @app.errorhandler(404)
    def not_found(e):
        return jsonify(error="Not found"), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify(error="Method not allowed"), 405

    @app.errorhandler(500)
    def internal_error(e):
        error_logger.error(f"500 Internal Server Error:\n{traceback.format_exc()}")
        return jsonify(error="Internal server error"), 500

    @app.get("/health")
    def health():
        return jsonify(status="up and running"), 200

    return app
