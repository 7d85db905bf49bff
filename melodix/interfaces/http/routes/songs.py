"""Song lookup, submission, popularity and audio recognition."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from melodix.domain.songs import get_song, song_view, submit_song, top_songs
from melodix.interfaces.http.uploads import InvalidUpload, read_audio_upload
from melodix.support.identity import is_valid_object_id, read_device_id

logger = logging.getLogger(__name__)

songs_bp = Blueprint('songs_bp', __name__, url_prefix='/songs')


@songs_bp.route('/top/popular', methods=['GET'])
def popular_songs():
    settings = current_app.extensions['app_settings']
    return jsonify({'top_songs': top_songs(settings.top_songs_limit)}), 200


@songs_bp.route('/<song_id>', methods=['GET'])
def get_song_by_id(song_id: str):
    if not is_valid_object_id(song_id):
        return jsonify({'message': 'Invalid song ID format'}), 400
    song = get_song(song_id)
    if song is None:
        return jsonify({'message': 'Song not found'}), 404
    return jsonify(song_view(song)), 200


@songs_bp.route('', methods=['POST'])
def create_song():
    payload = request.get_json(silent=True) or {}
    if not (payload.get('isrc') or payload.get('title')):
        return jsonify({'message': 'title is required'}), 400
    song, created = submit_song(payload)
    return jsonify(song_view(song)), 201 if created else 200


@songs_bp.route('/recognize', methods=['POST'])
def recognize_song():
    try:
        audio, filename, mimetype = read_audio_upload(request.files)
    except InvalidUpload as exc:
        return jsonify({'message': str(exc)}), 400

    pipeline = current_app.extensions['recognition_pipeline']
    # Recognition errors carry their own status and are translated centrally
    outcome = pipeline.recognize(
        audio,
        filename=filename or 'audio',
        mimetype=mimetype or 'audio/mpeg',
        device_id=read_device_id(request.headers),
    )
    return jsonify(outcome.song), 200


__all__ = ['songs_bp']
