"""Chunk splitting for upload streams.

Splits an incoming byte source into chunks no larger than the backend's
per-call limit, and chooses that limit from the declared upload length.
"""

import inspect
from typing import AsyncIterator, Optional, Tuple

from ....config import UploadStoreSettings
from ..entities import ByteSource, ChunkDescriptor


async def split(source: ByteSource, max_chunk_bytes: int) -> AsyncIterator[bytes]:
    """Lazily split ``source`` into chunks of at most ``max_chunk_bytes``.

    Every chunk except possibly the last is exactly ``max_chunk_bytes``
    long and an empty source yields nothing. The sequence is consumed once.
    A partially filled chunk is never yielded: if reading is cancelled or
    fails mid-chunk, the bytes buffered for that chunk are dropped along
    with the call.
    """
    if max_chunk_bytes <= 0:
        raise ValueError(f"max_chunk_bytes must be positive, got {max_chunk_bytes}")

    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
        for start in range(0, len(data), max_chunk_bytes):
            yield data[start:start + max_chunk_bytes]
        return

    if hasattr(source, "read"):
        async for chunk in _split_readable(source, max_chunk_bytes):
            yield chunk
        return

    if hasattr(source, "__aiter__"):
        async for chunk in _split_async_iterable(source, max_chunk_bytes):
            yield chunk
        return

    raise TypeError(f"Unsupported upload source: {type(source).__name__}")


async def _split_readable(source, max_chunk_bytes: int) -> AsyncIterator[bytes]:
    while True:
        buffer = bytearray()
        while len(buffer) < max_chunk_bytes:
            data = source.read(max_chunk_bytes - len(buffer))
            if inspect.isawaitable(data):
                data = await data
            if not data:
                break
            buffer.extend(data)

        if buffer:
            yield bytes(buffer)
        if len(buffer) < max_chunk_bytes:
            return


async def _split_async_iterable(source, max_chunk_bytes: int) -> AsyncIterator[bytes]:
    buffer = bytearray()
    async for data in source:
        if not data:
            continue
        buffer.extend(data)
        while len(buffer) >= max_chunk_bytes:
            yield bytes(buffer[:max_chunk_bytes])
            del buffer[:max_chunk_bytes]

    if buffer:
        yield bytes(buffer)


async def describe(
    chunks: AsyncIterator[bytes],
    first_sequence_number: int = 0,
) -> AsyncIterator[Tuple[ChunkDescriptor, bytes]]:
    """Pair each chunk with its descriptor, numbering from ``first_sequence_number``."""
    sequence_number = first_sequence_number
    async for chunk in chunks:
        yield ChunkDescriptor(sequence_number=sequence_number, byte_length=len(chunk)), chunk
        sequence_number += 1


def choose_chunk_size(declared_length: Optional[int], settings: UploadStoreSettings) -> int:
    """Pick the chunk size for an upload of ``declared_length`` bytes.

    Unknown or zero lengths use the default size, small uploads shrink the
    chunk to the upload itself, medium uploads use the default and large
    uploads use the maximum the backend accepts.
    """
    if not declared_length or declared_length <= 0:
        return settings.default_chunk_size

    if declared_length < settings.small_upload_threshold:
        return min(settings.default_chunk_size, declared_length)

    if declared_length < settings.large_upload_threshold:
        return settings.default_chunk_size

    return settings.max_chunk_size
