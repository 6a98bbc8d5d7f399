from __future__ import annotations
import copy
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from core.runtime_config import RuntimeConfig

__all__ = ['StateSnapshotStore']
logger = logging.getLogger(__name__)


class StateSnapshotStore:
    """
    Original values of runtime variables, captured at most once per process.

    A repeated or re-entrant bootstrap must not overwrite the first capture
    with an already-overridden value, so later ``capture`` calls only return
    what was stored the first time.
    """

    def __init__(self, runtime: 'RuntimeConfig'):
        self._runtime = runtime
        self._captured: Dict[str, Any] = {}

    def capture(self, name: str) -> Any:
        if name in self._captured:
            logger.debug(f"Snapshot for '{name}' already captured; keeping original")
            return self._captured[name]
        value = copy.deepcopy(self._runtime.get(name))
        self._captured[name] = value
        logger.debug(f"Captured initial value of '{name}'")
        return value

    def get(self, name: str) -> Optional[Any]:
        return self._captured.get(name)

    def is_captured(self, name: str) -> bool:
        return name in self._captured

    def names(self) -> List[str]:
        return list(self._captured)

    def __len__(self) -> int:
        return len(self._captured)
