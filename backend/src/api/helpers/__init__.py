"""API helper utilities."""
from api.helpers.response import serialize_entry, transform_response

__all__ = [
    "serialize_entry",
    "transform_response",
]
