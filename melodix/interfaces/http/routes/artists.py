"""Artist concert listings."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from melodix.database.db_manager import Artist, db
from melodix.support.identity import is_valid_object_id

artists_bp = Blueprint('artists_bp', __name__, url_prefix='/artists')


@artists_bp.route('/<artist_id>/concerts', methods=['GET'])
def artist_concerts(artist_id: str):
    if not is_valid_object_id(artist_id):
        return jsonify({'message': 'Invalid artist ID format'}), 400

    # Lookup failures are local faults and surface as 5xx centrally
    artist = db.session.get(Artist, artist_id)
    if artist is None:
        return jsonify({'message': 'Artist not found'}), 404

    country = (request.args.get('country') or '').strip() or None
    limit = request.args.get('limit', type=int)
    service = current_app.extensions['concert_service']
    return jsonify(service.concerts_for(artist, country=country, limit=limit)), 200


__all__ = ['artists_bp']
