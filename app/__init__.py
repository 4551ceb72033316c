"""Application factory for the NimbusCalc server."""

from __future__ import annotations

import importlib
from pathlib import Path

import yaml
from flask import Flask
from werkzeug.exceptions import HTTPException

from common.errors import AppError, InternalAppError, NotFoundAppError, ValidationAppError
from common.logging import get_logger, install_request_logging
from common.responses import fail, ok

from . import config as config_module
from .blueprints import discover_plugins, register_plugin_blueprints

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yml"

logger = get_logger(__name__)


def _load_yaml_config(path: Path = CONFIG_PATH) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _load_manifests(plugin_settings: dict) -> list[dict[str, str]]:
    manifests: list[dict[str, str]] = []
    for dotted in discover_plugins():
        module = importlib.import_module(dotted)
        manifest = getattr(module, "manifest", None)
        if not manifest:
            continue
        entry = dict(manifest)
        blueprint = entry.get("blueprint")
        plugin_config = plugin_settings.get(blueprint, {}) if blueprint else {}
        if plugin_config.get("docs"):
            entry["docs"] = plugin_config["docs"]
        if plugin_config.get("summary"):
            entry["summary"] = plugin_config["summary"]
        if blueprint:
            entry["api"] = f"/api/{blueprint}"
        manifests.append(entry)
    manifests.sort(key=lambda item: item["title"].lower())
    return manifests


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_path=str(Path(__file__).resolve().parent.parent / "instance"))
    app.config.from_object(config_module.BaseConfig)

    yaml_config = _load_yaml_config()
    site_settings = yaml_config.get("site", {}) or {}
    plugin_settings = yaml_config.get("plugins", {}) or {}

    app.config["SITE_SETTINGS"] = site_settings
    if "max_content_length_mb" in site_settings:
        try:
            app.config["MAX_CONTENT_LENGTH"] = int(float(site_settings["max_content_length_mb"]) * 1024 * 1024)
        except (TypeError, ValueError):
            logger.warning("ignoring invalid max_content_length_mb=%r", site_settings["max_content_length_mb"])
    app.config["PLUGIN_SETTINGS"] = plugin_settings

    if config_name:
        config_obj = getattr(config_module, config_name, None)
        if config_obj is None:
            raise ValueError(f"Unknown configuration '{config_name}'")
        app.config.from_object(config_obj)

    install_request_logging(app)
    register_plugin_blueprints(app)
    app.config["PLUGIN_MANIFESTS"] = _load_manifests(plugin_settings)

    @app.after_request
    def apply_response_headers(response):
        """Attach strict security headers to every outgoing response."""

        configured = app.config.get("RESPONSE_HEADERS", {})
        for header, value in configured.items():
            if header not in response.headers:
                response.headers[header] = value
        return response

    @app.get("/")
    def home():
        site_config = app.config.get("SITE_SETTINGS", {})
        return ok(
            {
                "site": {"title": site_config.get("title", "NimbusCalc")},
                "plugins": app.config.get("PLUGIN_MANIFESTS", []),
            }
        )

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        return fail(error)

    @app.errorhandler(404)
    def not_found(error):
        return fail(NotFoundAppError(message="Resource not found"))

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return fail(
            ValidationAppError(message=error.description or error.name, code="http_error"),
            status=error.code or 400,
        )

    @app.errorhandler(500)
    def server_error(error):  # pragma: no cover
        return fail(InternalAppError(message="Internal server error"))

    return app


__all__ = ["create_app"]
