"""
API gateway: combines the auth and events blueprints under /api.
This is the local entrypoint for development.

    python -m calendar_app.gateway.server
"""

from flask import Flask, jsonify
from flask_cors import CORS
import os
import logging
import sys
from dotenv import load_dotenv

load_dotenv()

# Basic console logging during API requests
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="[%(levelname)s] %(asctime)s - %(message)s",
)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"


def create_app() -> Flask:
    """
    Application factory for creating the Flask app.

    Importing the blueprints loads DATABASE_URL and JWT_SECRET; either one
    missing raises RuntimeError here, before the app can serve anything.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__)

    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()]
    CORS(app, resources={
        r"/api/*": {
            "origins": origins,
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }
    })

    # --- REGISTER BLUEPRINTS ---
    from calendar_app.auth_service.routes import auth_bp
    from calendar_app.events_service.routes import events_bp
    from calendar_app.errors import register_error_handlers

    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(events_bp, url_prefix="/api")
    register_error_handlers(app)

    logging.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return jsonify({"status": "gateway_ok"}), 200

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


def main() -> None:
    from calendar_app.database.init_db import init_db
    from calendar_app.errors import StoreUnavailable

    try:
        app = create_app()
        init_db()
    except (RuntimeError, StoreUnavailable) as e:
        logging.error(f"Startup failed: {e}")
        sys.exit(1)

    port = int(os.getenv("PORT", 5000))
    logging.info(f"Server running on port {port}")
    app.run(host="0.0.0.0", port=port, threaded=True)


if __name__ == "__main__":
    main()
