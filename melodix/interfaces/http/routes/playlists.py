"""Playlist routes: catalog import, user playlists and sharing.

Playlist access is scoped by the ``x-device-id`` header alone; a device
does not need a stored user record to own or join playlists.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from melodix.domain.playlists import (
    Outcome,
    add_song,
    create_playlist,
    delete_playlist,
    device_playlists,
    get_playlist,
    leave_playlist,
    playlist_view,
    playlists_for_you,
    remove_song,
    share_playlist,
)
from melodix.domain.songs import get_song
from melodix.domain.users import get_device_user
from melodix.support.identity import is_valid_object_id, read_device_id

playlists_bp = Blueprint('playlists_bp', __name__, url_prefix='/playlists')


def _invalid_playlist_id():
    return jsonify({'message': 'Invalid playlist ID format'}), 400


def _playlist_not_found():
    return jsonify({'message': 'Playlist not found'}), 404


def _device_id_required():
    return jsonify({'message': 'Device ID is required'}), 400


@playlists_bp.route('', methods=['POST'])
def import_catalog_playlists():
    payload = request.get_json(silent=True) or {}
    isrc = (payload.get('isrc') or '').strip() or None
    title = (payload.get('title') or '').strip() or None
    if not isrc and not title:
        return jsonify({'message': 'Either ISRC or title is required'}), 400

    importer = current_app.extensions['catalog_import']
    body, status = importer.import_for(
        isrc=isrc,
        title=title,
        artist_subtitle=(payload.get('artist_subtitle') or '').strip() or None,
    )
    return jsonify(body), status


@playlists_bp.route('/create', methods=['POST'])
def create_user_playlist():
    device_id = read_device_id(request.headers)
    if not device_id:
        return _device_id_required()
    payload = request.get_json(silent=True) or {}
    name = (payload.get('playlistName') or payload.get('playlist_name') or '').strip()
    if not name:
        return jsonify({'message': 'Playlist name is required'}), 400

    playlist = create_playlist(device_id, name, (payload.get('description') or '').strip() or None)
    return jsonify({'message': 'Playlist created', 'data': playlist.to_dict()}), 201


@playlists_bp.route('/all', methods=['GET'])
def list_device_playlists():
    device_id = read_device_id(request.headers)
    if not device_id:
        return _device_id_required()
    return jsonify({'data': device_playlists(device_id)}), 200


@playlists_bp.route('/for-you', methods=['GET'])
def for_you():
    device_id = read_device_id(request.headers)
    if not device_id:
        return _device_id_required()
    # Devices without a stored user have no history and only see featured playlists
    user = get_device_user(device_id)
    settings = current_app.extensions['app_settings']
    data = playlists_for_you(
        device_id,
        list(user.search_history or []) if user is not None else [],
        match_limit=settings.for_you_match_limit,
        featured_names=settings.featured_playlist_names,
    )
    return jsonify({'message': 'Playlists fetched successfully', 'data': data}), 200


@playlists_bp.route('/<playlist_id>', methods=['GET'])
def get_playlist_by_id(playlist_id: str):
    if not is_valid_object_id(playlist_id):
        return _invalid_playlist_id()
    playlist = get_playlist(playlist_id)
    if playlist is None:
        return _playlist_not_found()
    return jsonify({'data': playlist_view(playlist)}), 200


@playlists_bp.route('/<playlist_id>', methods=['PUT'])
def add_song_to_playlist(playlist_id: str):
    device_id = read_device_id(request.headers)
    if not device_id:
        return _device_id_required()
    payload = request.get_json(silent=True) or {}
    song_id = str((payload.get('songData') or {}).get('_id') or '').strip()
    if not song_id:
        return jsonify({'message': 'Song ID is required'}), 400
    if not is_valid_object_id(playlist_id):
        return _invalid_playlist_id()

    playlist = get_playlist(playlist_id)
    if playlist is None:
        return _playlist_not_found()
    song = get_song(song_id)
    if song is None:
        return jsonify({'message': 'Song not found'}), 404

    if add_song(playlist, device_id, song) is Outcome.DUPLICATE:
        return jsonify({'message': 'Song already exists in the playlist'}), 400
    return jsonify({'message': 'Song added successfully'}), 200


@playlists_bp.route('/<playlist_id>', methods=['DELETE'])
def delete_user_playlist(playlist_id: str):
    device_id = read_device_id(request.headers)
    if not device_id:
        return _device_id_required()
    if not is_valid_object_id(playlist_id):
        return _invalid_playlist_id()
    playlist = get_playlist(playlist_id)
    if playlist is None:
        return _playlist_not_found()
    if delete_playlist(playlist, device_id) is Outcome.FORBIDDEN:
        return jsonify({'message': 'Only the owner can delete the playlist'}), 403
    return jsonify({'message': 'Playlist deleted'}), 200


@playlists_bp.route('/<playlist_id>/share', methods=['POST'])
def share_user_playlist(playlist_id: str):
    if not is_valid_object_id(playlist_id):
        return _invalid_playlist_id()
    payload = request.get_json(silent=True) or {}
    target = str(payload.get('target_device_id') or '').strip() or read_device_id(request.headers)
    if not target:
        return _device_id_required()

    playlist = get_playlist(playlist_id)
    if playlist is None:
        return _playlist_not_found()
    if share_playlist(playlist, target) is Outcome.ALREADY_MEMBER:
        return jsonify({'message': 'Device already has access to this playlist'}), 400
    return jsonify({'message': 'Device added to playlist successfully'}), 200


@playlists_bp.route('/<playlist_id>/leave', methods=['DELETE'])
def leave_user_playlist(playlist_id: str):
    device_id = read_device_id(request.headers)
    if not device_id:
        return _device_id_required()
    if not is_valid_object_id(playlist_id):
        return _invalid_playlist_id()
    playlist = get_playlist(playlist_id)
    if playlist is None:
        return _playlist_not_found()

    outcome = leave_playlist(playlist, device_id)
    if outcome is Outcome.OWNER_CANNOT_LEAVE:
        return jsonify({'message': 'Owner cannot leave playlist. Delete the playlist instead.'}), 400
    if outcome is Outcome.NOT_MEMBER:
        return jsonify({'message': 'You are not a member of this playlist.'}), 400
    return jsonify({'message': 'Successfully left the playlist'}), 200


@playlists_bp.route('/<playlist_id>/songs/<song_id>', methods=['DELETE'])
def remove_song_from_playlist(playlist_id: str, song_id: str):
    device_id = read_device_id(request.headers)
    if not device_id:
        return _device_id_required()
    if not is_valid_object_id(playlist_id):
        return _invalid_playlist_id()
    if not is_valid_object_id(song_id):
        return jsonify({'message': 'Invalid song ID format'}), 400
    playlist = get_playlist(playlist_id)
    if playlist is None:
        return _playlist_not_found()

    outcome = remove_song(playlist, device_id, song_id)
    if outcome is Outcome.FORBIDDEN:
        return jsonify({'message': 'Only the owner can delete songs from the playlist'}), 403
    if outcome is Outcome.NOT_IN_PLAYLIST:
        return jsonify({'message': 'Song not found in playlist'}), 404
    return jsonify({'message': 'Song removed from playlist successfully'}), 200


__all__ = ['playlists_bp']
