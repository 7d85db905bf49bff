#!/usr/bin/env python
"""Device-identifier resolution through Flask-Login."""

from __future__ import annotations

from flask import jsonify, request
from flask_login import LoginManager

from melodix.support.identity import read_device_id

login_manager = LoginManager()
# No cookies or sessions: every request presents its device id again
login_manager.session_protection = None
login_manager.login_message = None


def init_auth(app):
    """Attach Flask-Login to the Flask app with a header-based request loader."""
    from melodix.database.db_manager import DeviceUser

    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(device_id: str) -> DeviceUser | None:
        return DeviceUser.query.filter_by(device_id=device_id).first()

    @login_manager.request_loader
    def load_device_user(req) -> DeviceUser | None:
        device_id = read_device_id(req.headers)
        if device_id is None:
            return None
        return DeviceUser.query.filter_by(device_id=device_id).first()

    @login_manager.unauthorized_handler
    def _unauthorized():
        if read_device_id(request.headers) is None:
            return jsonify({"message": "Device ID required"}), 401
        return jsonify({"message": "User not found"}), 404

    return login_manager


__all__ = ["login_manager", "init_auth"]
