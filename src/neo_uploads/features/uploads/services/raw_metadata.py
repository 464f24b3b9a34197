"""Raw metadata header parsing.

Resumable upload clients send metadata as a single header value of
comma-separated pairs, each a key and a base64 value separated by one space.
The value may be omitted for keys that carry no data::

    filename d29ybGRfZG9taW5hdGlvbl9wbGFuLnBkZg==,is_confidential
"""

import base64
import binascii
from typing import Dict, Mapping, Optional

from ....core.exceptions import InvalidMetadata


def parse_raw_metadata(header: Optional[str]) -> Dict[str, str]:
    """Parse a raw metadata header into decoded key/value pairs.

    Decoded bytes that are not valid UTF-8 become replacement characters.

    Raises:
        InvalidMetadata: On empty or duplicate keys, stray whitespace or
            values that are not valid base64.
    """
    result: Dict[str, str] = {}
    if header is None or not header.strip():
        return result

    for entry in header.split(","):
        entry = entry.strip()
        key, sep, encoded = entry.partition(" ")

        if not key:
            raise InvalidMetadata("Metadata key must not be empty", entry=entry)
        if " " in encoded:
            raise InvalidMetadata(f"Metadata entry for '{key}' contains more than one space", entry=entry)
        if key in result:
            raise InvalidMetadata(f"Duplicate metadata key '{key}'", entry=entry)

        if not sep or not encoded:
            result[key] = ""
            continue

        try:
            result[key] = base64.b64decode(encoded, validate=True).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as e:
            raise InvalidMetadata(f"Metadata value for '{key}' is not valid base64", entry=entry) from e

    return result


def serialize_raw_metadata(metadata: Mapping[str, str]) -> str:
    """Serialize decoded pairs back into the raw header form."""
    parts = []
    for key, value in metadata.items():
        if value:
            parts.append(f"{key} {base64.b64encode(value.encode('utf-8')).decode('ascii')}")
        else:
            parts.append(key)
    return ",".join(parts)
