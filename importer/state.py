"""
Single owner of an importer's mutable state
"""

from typing import Optional
from datetime import datetime
from schemas.metrics import ImporterConfig, to_utc


class ImporterState:
    """
    Holds the active config and the checkpoint of one importer.

    Callers mutate it only while holding the importer's import lock; the lock
    serializes imports, this object just keeps the two fields behind narrow
    accessors.
    """

    def __init__(self, config: ImporterConfig):
        self._config = config
        self._checkpoint: Optional[datetime] = None

    @property
    def config(self) -> ImporterConfig:
        return self._config

    def replace_config(self, config: ImporterConfig):
        self._config = config

    @property
    def checkpoint(self) -> Optional[datetime]:
        """Last successfully imported timestamp, None while unknown"""
        return self._checkpoint

    @property
    def checkpoint_known(self) -> bool:
        return self._checkpoint is not None

    def advance(self, timestamp: datetime):
        self._checkpoint = to_utc(timestamp)

    def invalidate(self):
        self._checkpoint = None
