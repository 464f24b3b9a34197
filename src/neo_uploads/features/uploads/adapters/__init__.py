"""Blob Backend adapters.

The Azure backend imports its SDK lazily; install the ``azure`` extra to
use it.
"""

from .memory_backend import InMemoryBlobBackend, create_memory_backend
from .azure_backend import AzureBlobBackend, create_azure_backend, translate_errors

__all__ = [
    "InMemoryBlobBackend",
    "create_memory_backend",
    "AzureBlobBackend",
    "create_azure_backend",
    "translate_errors",
]
