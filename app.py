"""
Grid Mask Annotator
===================
Backend for annotating per-sample scene images with a 256x256 cell mask.
Serves the mask store endpoints (/save, /check) used by the annotation
client, and an editor API that keeps the grid state for the current sample.
"""

import logging
import signal
import sys
from typing import Any, Mapping, Optional

from flask import Flask
from flask_cors import CORS

from backend.config import load_config
from backend.logging_config import setup_logging
from backend.mask_store import MaskStore
from backend.session_manager import SessionManager
from routes.editor import register_editor_routes
from routes.masks import register_mask_routes

logger = logging.getLogger("app")


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.update(load_config())
    if config:
        app.config.update(config)

    CORS(app)

    # Attach the mask store and the editing session to the app
    app.mask_store = MaskStore(app.config["MASKS_DIR"])
    app.session_manager = SessionManager(
        app.mask_store, interpolate=app.config["INTERPOLATE_STROKES"]
    )

    samples_dir = app.config.get("SAMPLES_DIR")
    if samples_dir:
        try:
            app.session_manager.load_root(samples_dir)
        except FileNotFoundError as e:
            logger.warning("Not loading samples at startup: %s", e)

    # Register routes
    register_mask_routes(app)
    register_editor_routes(app)

    return app


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    logger.info("Shutting down Grid Mask Annotator...")
    sys.exit(0)


if __name__ == "__main__":
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    app = create_app()
    setup_logging(app.config["LOG_LEVEL"], app.config["LOG_FILE"])
    host, port, debug = app.config["HOST"], app.config["PORT"], app.config["DEBUG"]
    logger.info("Grid Mask Annotator running on http://%s:%s  (debug=%s)", host, port, debug)
    logger.info("Masks are stored in %s", app.config["MASKS_DIR"])
    app.run(host=host, port=port, debug=debug)
