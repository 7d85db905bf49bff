"""Device registration and search history."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from melodix.domain.songs import get_song
from melodix.domain.users import (
    append_history,
    artists_from_history,
    clear_history,
    history_views,
    register_device,
    remove_from_history,
)

users_bp = Blueprint('users_bp', __name__, url_prefix='/users')


@users_bp.route('', methods=['POST'])
def register_user():
    payload = request.get_json(silent=True) or {}
    device_id = str(payload.get('device_id') or '').strip()
    if not device_id:
        return jsonify({'message': 'device_id is required'}), 400

    user, created = register_device(device_id)
    return jsonify(user.to_dict()), 201 if created else 200


@users_bp.route('/search-history', methods=['POST'])
@login_required
def add_search_history():
    device_id = current_user.device_id
    payload = request.get_json(silent=True) or {}
    song_id = str(payload.get('song_id') or '').strip()
    if not song_id:
        return jsonify({'message': 'song_id is required'}), 400
    if get_song(song_id) is None:
        return jsonify({'message': 'Song not found'}), 404

    if not append_history(device_id, song_id):
        return jsonify({'message': 'Song already in search history'}), 200
    return jsonify({'message': 'Search history updated'}), 200


@users_bp.route('/search-history', methods=['GET'])
@login_required
def get_search_history():
    return jsonify({'search_history': history_views(current_user.device_id)}), 200


@users_bp.route('/search-history/<song_id>', methods=['DELETE'])
@login_required
def delete_history_item(song_id: str):
    if not remove_from_history(current_user.device_id, song_id):
        return jsonify({'message': 'Song not found in history'}), 404
    return jsonify({'message': 'Song removed from history'}), 200


@users_bp.route('/search-history', methods=['DELETE'])
@login_required
def clear_search_history():
    clear_history(current_user.device_id)
    return jsonify({'message': 'All history cleared'}), 200


@users_bp.route('/artists-from-history', methods=['GET'])
@login_required
def get_artists_from_history():
    return jsonify({'artists': artists_from_history(current_user.device_id)}), 200


__all__ = ['users_bp']
