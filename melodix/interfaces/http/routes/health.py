from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from melodix.database.db_manager import db

health_bp = Blueprint("health_bp", __name__)


@health_bp.route("/")
def index():
    return jsonify({"message": "Welcome to Melodix API"}), 200


@health_bp.route("/healthz")
def healthz():
    status = 200
    checks = {}

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:
        db.session.rollback()
        status = 503
        checks["database"] = f"error: {exc}"

    settings = current_app.extensions.get("app_settings")
    if settings is not None:
        checks["recognition"] = "configured" if settings.shazam_key else "unconfigured"
        checks["catalog"] = "configured" if settings.spotify_configured else "unconfigured"
        checks["events"] = "configured" if settings.ticketmaster_key else "unconfigured"

    overall = "ok" if status == 200 else "degraded"
    return jsonify({"status": overall, "checks": checks}), status
