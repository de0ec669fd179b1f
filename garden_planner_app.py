"""WSGI entry point for the garden row planner.

Serves the JSON API from ``create_app``. Host, port and debug mode come from
``GARDEN_HOST``, ``GARDEN_PORT`` and ``GARDEN_DEBUG``; everything else is read
by :class:`app.config.AppConfig`.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from app import create_app


def build_app(secret: Optional[str] = None):
    """Create the Flask app, applying a secret key from the environment when given."""
    overrides = {"secret_key": secret} if secret else None
    return create_app(overrides)


app = build_app(os.getenv("GARDEN_SECRET_KEY"))


def _env_flag_true(name: str) -> bool:
    v = os.getenv(name)
    return bool(v and v.lower() in ("1", "true", "yes", "on"))


def main() -> int:
    host = os.getenv("GARDEN_HOST", "127.0.0.1")
    port = int(os.getenv("GARDEN_PORT", "8000"))
    debug = _env_flag_true("GARDEN_DEBUG")

    logging.info("Starting garden planner on %s:%s", host, port)

    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False)
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except Exception as exc:  # pragma: no cover - top-level runtime errors
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
