"""Object naming for uploads.

Each upload lives in one object named ``{prefix}/{id}``. Uploads created
hidden keep their bookkeeping in a zero-length ``{prefix}/{id}.pending``
object until the first commit.
"""

from typing import Optional, Tuple

PENDING_SUFFIX = ".pending"


class BlobNaming:
    """Maps upload ids to backend object names and back."""

    def __init__(self, prefix: str = "uploads"):
        self.prefix = prefix.strip("/")

    @property
    def listing_prefix(self) -> str:
        return f"{self.prefix}/" if self.prefix else ""

    def object_name(self, upload_id: str) -> str:
        return f"{self.listing_prefix}{upload_id}"

    def pending_name(self, upload_id: str) -> str:
        return f"{self.listing_prefix}{upload_id}{PENDING_SUFFIX}"

    def parse(self, name: str) -> Optional[Tuple[str, bool]]:
        """Return ``(upload_id, is_pending)`` for a listed name, or None.

        Names outside the prefix or in nested folders are not uploads.
        """
        if not name.startswith(self.listing_prefix):
            return None

        rest = name[len(self.listing_prefix):]
        if not rest or "/" in rest:
            return None

        if rest.endswith(PENDING_SUFFIX):
            upload_id = rest[:-len(PENDING_SUFFIX)]
            return (upload_id, True) if upload_id else None
        return rest, False
