"""Upload services."""

from .blob_naming import BlobNaming, PENDING_SUFFIX
from .metadata_codec import UploadMetadataCodec, sanitize_key
from .raw_metadata import parse_raw_metadata, serialize_raw_metadata
from .chunk_splitter import split, describe, choose_chunk_size
from .strategy_selector import StrategySelector
from .checksum_verifier import ChecksumVerifier, CHECKSUM_ALGORITHMS
from .expiration_sweeper import ExpirationSweeper
from .upload_store import UploadStore, create_upload_store

__all__ = [
    "BlobNaming",
    "PENDING_SUFFIX",
    "UploadMetadataCodec",
    "sanitize_key",
    "parse_raw_metadata",
    "serialize_raw_metadata",
    "split",
    "describe",
    "choose_chunk_size",
    "StrategySelector",
    "ChecksumVerifier",
    "CHECKSUM_ALGORITHMS",
    "ExpirationSweeper",
    "UploadStore",
    "create_upload_store",
]
