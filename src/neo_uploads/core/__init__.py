"""Core domain layer for neo-uploads.

Exceptions and value objects shared by every feature module.
"""

from .exceptions import *  # noqa: F401,F403
from .value_objects import *  # noqa: F401,F403
