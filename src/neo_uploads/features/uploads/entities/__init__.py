"""Upload entities - domain objects and protocols."""

from .blob_properties import BlobProperties, BlobListing, CommittedBlock
from .block_reference import BlockReference
from .chunk_descriptor import ChunkDescriptor
from .protocols import BlobBackend, WriteStrategy, ByteSource
from .upload_record import UploadRecord

__all__ = [
    "BlobProperties",
    "BlobListing",
    "CommittedBlock",
    "BlockReference",
    "ChunkDescriptor",
    "BlobBackend",
    "WriteStrategy",
    "ByteSource",
    "UploadRecord",
]
