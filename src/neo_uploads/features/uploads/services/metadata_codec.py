"""Upload metadata codec.

Translates upload bookkeeping and user metadata to and from the flat
string-to-string metadata bag that block-oriented object stores attach to
each object.

Key layout (with the default prefixes)::

    upload_length        declared length, absent while deferred
    upload_created       ISO 8601 UTC creation time
    upload_expires       ISO 8601 UTC expiration time, absent if none
    upload_block_count   committed blocks (staged strategy)
    upload_strategy      strategy kind bound at creation
    upload_meta_<key>    base64 (UTF-8) user value

Underscores are used instead of dashes because backend metadata keys must be
valid identifiers.
"""

import base64
import binascii
import logging
import re
from datetime import datetime
from typing import Dict, Mapping, Optional

from ....config import StrategyKind, UploadStoreSettings
from ....utils import from_utc_string, to_utc_string
from ..entities import UploadRecord

logger = logging.getLogger(__name__)

_INVALID_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_]")

LENGTH_KEY = "length"
CREATED_KEY = "created"
EXPIRES_KEY = "expires"
BLOCK_COUNT_KEY = "block_count"
STRATEGY_KEY = "strategy"


def sanitize_key(key: str) -> str:
    """Map an arbitrary user key into the backend's identifier character set.

    Characters outside ``[A-Za-z0-9_]`` become ``_``, the result is lower
    cased, and ``_`` is prepended when it does not start with a letter or an
    underscore. Distinct keys can collide after sanitizing.
    """
    sanitized = _INVALID_KEY_CHARS.sub("_", key).lower()
    if not sanitized or not (sanitized[0].isalpha() or sanitized[0] == "_"):
        sanitized = "_" + sanitized
    return sanitized


class UploadMetadataCodec:
    """Encodes and decodes upload metadata bags."""

    def __init__(self, metadata_prefix: str = "upload_", user_metadata_prefix: str = "upload_meta_"):
        if not user_metadata_prefix.startswith(metadata_prefix) or user_metadata_prefix == metadata_prefix:
            raise ValueError("user_metadata_prefix must extend metadata_prefix")

        self.metadata_prefix = metadata_prefix
        self.user_metadata_prefix = user_metadata_prefix

        self.length_key = metadata_prefix + LENGTH_KEY
        self.created_key = metadata_prefix + CREATED_KEY
        self.expires_key = metadata_prefix + EXPIRES_KEY
        self.block_count_key = metadata_prefix + BLOCK_COUNT_KEY
        self.strategy_key = metadata_prefix + STRATEGY_KEY

    @classmethod
    def from_settings(cls, settings: UploadStoreSettings) -> "UploadMetadataCodec":
        return cls(settings.metadata_prefix, settings.user_metadata_prefix)

    def encode(
        self,
        user_metadata: Mapping[str, str],
        declared_length: Optional[int],
        created_at: datetime,
        strategy: Optional[StrategyKind] = None,
        expires_at: Optional[datetime] = None,
    ) -> Dict[str, str]:
        """Build a backend metadata bag for a new upload."""
        metadata: Dict[str, str] = {}
        originals: Dict[str, str] = {}

        for key, value in user_metadata.items():
            backend_key = self.user_metadata_prefix + sanitize_key(key)
            if backend_key in originals:
                logger.warning(
                    f"Metadata key '{key}' collides with '{originals[backend_key]}' "
                    f"after sanitizing; keeping the later value"
                )
            originals[backend_key] = key
            metadata[backend_key] = base64.b64encode(value.encode("utf-8")).decode("ascii")

        if declared_length is not None:
            metadata[self.length_key] = str(declared_length)
        metadata[self.created_key] = to_utc_string(created_at)
        if expires_at is not None:
            metadata[self.expires_key] = to_utc_string(expires_at)
        if strategy is not None:
            metadata[self.strategy_key] = strategy.value
        metadata[self.block_count_key] = "0"

        return metadata

    def decode(self, upload_id: str, metadata: Mapping[str, str]) -> UploadRecord:
        """Rebuild an upload record from a backend metadata bag.

        Missing fields decode to their unknown value and individually
        malformed entries are skipped. Keys outside the internal namespace
        are ignored.
        """
        record = UploadRecord(id=upload_id)

        for key, value in metadata.items():
            key = key.lower()
            if key.startswith(self.user_metadata_prefix):
                user_key = key[len(self.user_metadata_prefix):]
                try:
                    record.user_metadata[user_key] = base64.b64decode(value, validate=True).decode("utf-8")
                except (binascii.Error, ValueError):
                    logger.debug(f"Skipping malformed metadata value for '{user_key}' on upload {upload_id}")
            elif key == self.length_key:
                record.declared_length = self._parse_int(value)
            elif key == self.created_key:
                record.created_at = self._parse_datetime(value)
            elif key == self.expires_key:
                record.expires_at = self._parse_datetime(value)
            elif key == self.block_count_key:
                record.block_count = self._parse_int(value) or 0
            elif key == self.strategy_key:
                record.strategy = self._parse_strategy(value)

        return record

    def decode_expiration(self, metadata: Mapping[str, str]) -> Optional[datetime]:
        """Read only the expiration, without decoding user values."""
        for key, value in metadata.items():
            if key.lower() == self.expires_key:
                return self._parse_datetime(value)
        return None

    def with_expiration(self, metadata: Mapping[str, str], expires_at: Optional[datetime]) -> Dict[str, str]:
        return self._with(metadata, self.expires_key, to_utc_string(expires_at) if expires_at else None)

    def with_declared_length(self, metadata: Mapping[str, str], declared_length: int) -> Dict[str, str]:
        return self._with(metadata, self.length_key, str(declared_length))

    def with_block_count(self, metadata: Mapping[str, str], block_count: int) -> Dict[str, str]:
        return self._with(metadata, self.block_count_key, str(block_count))

    def with_strategy(self, metadata: Mapping[str, str], strategy: StrategyKind) -> Dict[str, str]:
        return self._with(metadata, self.strategy_key, strategy.value)

    @staticmethod
    def _with(metadata: Mapping[str, str], key: str, value: Optional[str]) -> Dict[str, str]:
        # Backends may return keys in a different case than written
        updated = {k: v for k, v in metadata.items() if k.lower() != key}
        if value is not None:
            updated[key] = value
        return updated

    @staticmethod
    def _parse_int(value: str) -> Optional[int]:
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            return None
        return parsed if parsed >= 0 else None

    @staticmethod
    def _parse_datetime(value: str) -> Optional[datetime]:
        try:
            return from_utc_string(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _parse_strategy(value: str) -> Optional[StrategyKind]:
        try:
            return StrategyKind(value.lower())
        except ValueError:
            return None
