"""Plugin discovery and blueprint registration."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Iterable

from flask import Blueprint, Flask

from common.logging import get_logger

PLUGIN_PACKAGE = "plugins"

logger = get_logger(__name__)


def discover_plugins(package: str = PLUGIN_PACKAGE) -> Iterable[str]:
    """Yield dotted import paths for every plugin package."""

    package_path = Path(__file__).resolve().parent.parent / package
    if not package_path.exists():
        return
    for module_info in sorted(pkgutil.iter_modules([str(package_path)]), key=lambda info: info.name):
        if module_info.ispkg:
            yield f"{package}.{module_info.name}"


def _plugin_blueprints(dotted: str) -> list[Blueprint]:
    module = importlib.import_module(f"{dotted}.api")
    module_blueprints = getattr(module, "blueprints", None)
    if module_blueprints:
        return list(module_blueprints)
    blueprint = getattr(module, "bp", None)
    return [blueprint] if blueprint is not None else []


def register_plugin_blueprints(app: Flask) -> None:
    for dotted in discover_plugins():
        for bp in _plugin_blueprints(dotted):
            app.register_blueprint(bp)
            logger.info("registered blueprint %s from %s", bp.name, dotted)


__all__ = ["PLUGIN_PACKAGE", "discover_plugins", "register_plugin_blueprints"]
