"""Checksum verification over persisted upload content."""

import hashlib
import hmac
import logging
from typing import Any, Callable, Dict, List

from ....core.exceptions import BlobNotFound, UnsupportedChecksumAlgorithm
from ....core.value_objects import Checksum
from ..entities import BlobBackend
from .blob_naming import BlobNaming

logger = logging.getLogger(__name__)

# Algorithm names are matched case-insensitively
CHECKSUM_ALGORITHMS: Dict[str, Callable[[], Any]] = {
    "md5": hashlib.md5,
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
}


class ChecksumVerifier:
    """Hashes an upload's full persisted content and compares digests.

    Verification is explicit: appends never trigger it.
    """

    def __init__(self, backend: BlobBackend, naming: BlobNaming):
        self.backend = backend
        self.naming = naming

    def supported_algorithms(self) -> List[str]:
        return list(CHECKSUM_ALGORITHMS)

    async def verify_checksum(self, upload_id: str, algorithm: str, expected: bytes) -> bool:
        """Check the persisted content against ``expected``.

        Args:
            upload_id: Upload to verify
            algorithm: Case-insensitive algorithm name
            expected: Raw digest bytes declared by the client

        Returns:
            True only if the digest matches exactly; False on mismatch or
            when neither the upload object nor its pending sidecar exists.

        Raises:
            UnsupportedChecksumAlgorithm: If the algorithm is not registered
        """
        factory = CHECKSUM_ALGORITHMS.get(algorithm.lower())
        if factory is None:
            raise UnsupportedChecksumAlgorithm(algorithm, CHECKSUM_ALGORITHMS)

        hasher = factory()
        try:
            async for data in self.backend.download_stream(self.naming.object_name(upload_id)):
                hasher.update(data)
        except BlobNotFound:
            # Hidden and never committed: the persisted content is empty
            try:
                await self.backend.get_properties(self.naming.pending_name(upload_id))
            except BlobNotFound:
                logger.debug(f"Checksum requested for missing upload {upload_id}")
                return False

        digest = hasher.digest()
        if len(digest) != len(expected):
            return False

        matched = hmac.compare_digest(digest, expected)
        if not matched:
            logger.info(f"Checksum mismatch for upload {upload_id} using {algorithm.lower()}")
        return matched

    async def verify(self, upload_id: str, checksum: Checksum) -> bool:
        return await self.verify_checksum(upload_id, checksum.algorithm, checksum.expected)
