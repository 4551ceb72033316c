"""Development entry point."""

import os

from app import create_app


def _resolve_port() -> int:
    value = os.getenv("NIMBUS_CALC_PORT") or os.getenv("PORT") or "5002"
    try:
        return int(value)
    except ValueError as exc:
        raise SystemExit(
            f"Invalid port '{value}'. Set NIMBUS_CALC_PORT to a number."
        ) from exc


def _resolve_host() -> str:
    return os.getenv("NIMBUS_CALC_HOST", "127.0.0.1")


if __name__ == "__main__":
    app = create_app(os.getenv("NIMBUS_CALC_CONFIG") or None)
    app.run(host=_resolve_host(), port=_resolve_port(), debug=False)
