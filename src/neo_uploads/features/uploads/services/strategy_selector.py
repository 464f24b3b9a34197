"""Strategy selection for new uploads."""

import logging
from typing import List, Optional

from ....config import StrategyKind, UploadStoreSettings
from ....core.exceptions import UnsupportedStrategy
from ..entities import BlobBackend

logger = logging.getLogger(__name__)


class StrategySelector:
    """Decides which write strategy a new upload is bound to.

    The configured default applies unless the declared length is above the
    staged threshold, or the backend lacks the default's write model and
    offers the other one.
    """

    def __init__(self, backend: BlobBackend, settings: UploadStoreSettings):
        self.backend = backend
        self.settings = settings

    def supported(self) -> List[StrategyKind]:
        kinds = []
        if self.backend.supports_append:
            kinds.append(StrategyKind.APPEND)
        if self.backend.supports_staged:
            kinds.append(StrategyKind.STAGED)
        return kinds

    def select(self, declared_length: Optional[int]) -> StrategyKind:
        supported = self.supported()
        if not supported:
            raise UnsupportedStrategy(self.settings.default_strategy.value, type(self.backend).__name__)

        kind = self.settings.default_strategy
        threshold = self.settings.staged_threshold_bytes
        if threshold is not None and declared_length is not None and declared_length > threshold:
            kind = StrategyKind.STAGED

        if kind not in supported:
            fallback = supported[0]
            logger.debug(
                f"Backend {type(self.backend).__name__} does not support {kind.value}, using {fallback.value}"
            )
            kind = fallback

        return kind
