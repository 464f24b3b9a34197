"""Checksum value object.

A client-declared digest paired with the name of the algorithm that produced
it. Algorithm names are case-insensitive and normalized to lower case.
"""

import base64
import binascii
from dataclasses import dataclass


@dataclass(frozen=True)
class Checksum:
    """Client-declared checksum.

    Holds raw digest bytes rather than a hex string; protocol adapters
    receive digests base64-encoded and decode them before verification.
    """

    algorithm: str
    expected: bytes

    def __post_init__(self):
        if not isinstance(self.algorithm, str) or not self.algorithm.strip():
            raise ValueError("Checksum algorithm cannot be empty")
        if not isinstance(self.expected, (bytes, bytearray)):
            raise ValueError(f"Checksum digest must be bytes, got {type(self.expected).__name__}")

        object.__setattr__(self, 'algorithm', self.algorithm.strip().lower())
        object.__setattr__(self, 'expected', bytes(self.expected))

    @classmethod
    def from_header(cls, value: str) -> 'Checksum':
        """Parse the ``"<algorithm> <base64 digest>"`` header form."""
        parts = value.strip().split(" ")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Invalid checksum header: {value!r}")

        algorithm, encoded = parts
        try:
            digest = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid checksum digest: {encoded!r}") from e

        return cls(algorithm, digest)

    def to_header(self) -> str:
        """Format as ``"<algorithm> <base64 digest>"``."""
        return f"{self.algorithm} {base64.b64encode(self.expected).decode('ascii')}"

    def __repr__(self) -> str:
        return f"Checksum('{self.algorithm}', {self.expected.hex()})"
