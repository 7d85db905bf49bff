"""Validation for the multipart audio upload used by recognition."""

from __future__ import annotations

from typing import Optional, Tuple

from werkzeug.datastructures import FileStorage

AUDIO_FIELD = "audio"

ALLOWED_AUDIO_MIMETYPES = frozenset({
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/m4a",
    "audio/x-m4a",
    "audio/mp4",
    "audio/aac",
    "video/mp4",
    # Some clients send recordings without a specific type
    "application/octet-stream",
})

INVALID_TYPE_MESSAGE = "Invalid file type. Only audio files are allowed."


class InvalidUpload(ValueError):
    pass


def read_audio_upload(files) -> Tuple[Optional[bytes], str, str]:
    """Return (bytes, filename, mimetype) of the ``audio`` field, or (None, ...) when absent.

    Raises InvalidUpload for files whose MIME type is not an accepted audio type.
    """
    upload: Optional[FileStorage] = files.get(AUDIO_FIELD)
    if upload is None or not upload.filename and not upload.mimetype:
        return None, "", ""
    mimetype = (upload.mimetype or "").lower()
    if mimetype not in ALLOWED_AUDIO_MIMETYPES:
        raise InvalidUpload(INVALID_TYPE_MESSAGE)
    data = upload.read()
    return (data or None), (upload.filename or "audio"), mimetype


__all__ = ["ALLOWED_AUDIO_MIMETYPES", "AUDIO_FIELD", "INVALID_TYPE_MESSAGE", "InvalidUpload", "read_audio_upload"]
