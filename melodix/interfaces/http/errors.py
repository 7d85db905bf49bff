"""Central translation of exceptions into JSON responses."""

from __future__ import annotations

import logging

from flask import current_app, jsonify
from sqlalchemy.exc import DisconnectionError, OperationalError
from werkzeug.exceptions import HTTPException

from melodix.database.db_manager import db
from melodix.errors import DocumentNotFound, MelodixError, PlaylistNotFound

logger = logging.getLogger(__name__)


def _rollback() -> None:
    try:
        db.session.rollback()
    except Exception:  # pragma: no cover - session already unusable
        logger.debug("Session rollback failed while handling an error", exc_info=True)


def register_error_handlers(app) -> None:
    @app.errorhandler(DocumentNotFound)
    def _document_not_found(exc):
        return jsonify({
            "message": "Document not found",
            "error": exc.message or "The requested document does not exist",
        }), 404

    @app.errorhandler(PlaylistNotFound)
    def _playlist_not_found(exc):
        return jsonify({"message": exc.message or "No playlist found"}), 404

    @app.errorhandler(MelodixError)
    def _domain_error(exc):
        if exc.status_code >= 500:
            logger.error("Unhandled domain error: %s", exc, exc_info=True)
        return jsonify({"message": exc.message or "Internal Server Error"}), exc.status_code

    @app.errorhandler(OperationalError)
    @app.errorhandler(DisconnectionError)
    def _database_unavailable(exc):
        _rollback()
        logger.error("Database unavailable: %s", exc, exc_info=True)
        return jsonify({
            "message": "Database connection error",
            "error": "Unable to connect to the database server",
        }), 503

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return jsonify({"message": exc.description, "error": exc.name}), exc.code

    @app.errorhandler(Exception)
    def _unhandled(exc):
        _rollback()
        logger.error("Unhandled error: %s", exc, exc_info=True)
        payload = {"message": "Internal Server Error"}
        if not current_app.config.get("IS_PRODUCTION"):
            payload["error"] = str(exc)
        return jsonify(payload), 500


__all__ = ["register_error_handlers"]
