"""Device users and search history."""

from .history import (
    append_history,
    artists_from_history,
    clear_history,
    get_device_user,
    history_views,
    register_device,
    remove_from_history,
)

__all__ = [
    "append_history",
    "artists_from_history",
    "clear_history",
    "get_device_user",
    "history_views",
    "register_device",
    "remove_from_history",
]
