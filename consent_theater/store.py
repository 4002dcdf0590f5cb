"""Application-level holder for the current dataset snapshot."""
import logging
import threading
from typing import Optional, Tuple

from .models import Dataset

logger = logging.getLogger(__name__)


class DatasetStore:
    """Holds one immutable ``Dataset`` reference.

    ``replace`` is the only mutation. Readers always see either the old or
    the new snapshot, never a partial one. Concurrent ingestions are not
    cancelled; whichever calls ``replace`` last wins.
    """

    def __init__(self, initial: Optional[Dataset] = None):
        self._lock = threading.Lock()
        self._snapshot = initial or Dataset()
        self._generation = 0

    @property
    def snapshot(self) -> Dataset:
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._generation

    def read(self) -> Tuple[Dataset, int]:
        with self._lock:
            return self._snapshot, self._generation

    def replace(self, dataset: Dataset) -> int:
        with self._lock:
            self._snapshot = dataset
            self._generation += 1
            generation = self._generation
        logger.info("Dataset replaced (generation %s, source=%s, apps=%s)",
                    generation, dataset.source, len(dataset.apps))
        return generation
