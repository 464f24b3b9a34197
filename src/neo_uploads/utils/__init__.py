"""Utilities module for neo-uploads."""

from .ids import generate_uuid_v7, generate_upload_id
from .timezone import utc_now, ensure_utc, to_utc_string, from_utc_string

__all__ = [
    # Identifiers
    "generate_uuid_v7",
    "generate_upload_id",

    # Timezone Utilities
    "utc_now",
    "ensure_utc",
    "to_utc_string",
    "from_utc_string",
]
