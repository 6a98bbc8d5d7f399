"""
Explicit stand-in for the host's global namespace.

Every component receives the same ``RuntimeConfig`` instead of mutating
ambient globals. Writes go through ``set`` and leave an ``OverrideRecord``
behind; host functions are reached through ``call`` so interceptors can wrap
them without monkey-patching.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from core.interceptors import Interceptor, InterceptorChain
from core.snapshot import StateSnapshotStore

__all__ = ['OverrideRecord', 'RuntimeConfig']
logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class OverrideRecord:
    name: str
    previous: Any
    value: Any
    owner: Optional[str] = None
    existed: bool = True


class RuntimeConfig:
    def __init__(self, variables: Optional[Mapping[str, Any]] = None,
                 functions: Optional[Mapping[str, Callable[..., Any]]] = None):
        self._values: Dict[str, Any] = dict(variables or {})
        self._functions: Dict[str, InterceptorChain] = {}
        self._history: List[OverrideRecord] = []
        for name, fn in (functions or {}).items():
            self.define(name, fn)
        self.snapshots = StateSnapshotStore(self)
        # Host capabilities are probed once for the life of the runtime.
        self.feature_detector: Optional[Any] = None
        self.deprecated_flags: Optional[Any] = None

    # -- variables -----------------------------------------------------------

    def get(self, name: str, default: Any = _MISSING) -> Any:
        if name in self._values:
            return self._values[name]
        if default is _MISSING:
            raise KeyError(f"Unknown runtime variable: '{name}'")
        return default

    def set(self, name: str, value: Any, *, owner: Optional[str] = None) -> OverrideRecord:
        existed = name in self._values
        record = OverrideRecord(name=name, previous=self._values.get(name), value=value,
                                owner=owner, existed=existed)
        self._values[name] = value
        self._history.append(record)
        logger.debug(f"Runtime variable '{name}' set by {owner or 'unknown'}")
        return record

    def undo(self, record: OverrideRecord) -> None:
        """Put back the value a record replaced."""
        if record.existed:
            self._values[record.name] = record.previous
        else:
            self._values.pop(record.name, None)
        self._history.append(OverrideRecord(name=record.name, previous=record.value,
                                            value=record.previous, owner=f'undo:{record.owner}',
                                            existed=True))

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    @property
    def history(self) -> List[OverrideRecord]:
        return list(self._history)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    # -- functions -----------------------------------------------------------

    def define(self, name: str, fn: Callable[..., Any]) -> None:
        if name in self._functions:
            self._functions[name].target = fn
        else:
            self._functions[name] = InterceptorChain(name, fn)

    def has_function(self, name: str) -> bool:
        return name in self._functions

    def function(self, name: str) -> InterceptorChain:
        try:
            return self._functions[name]
        except KeyError:
            raise KeyError(f"Unknown runtime function: '{name}'") from None

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        return self.function(name)(*args, **kwargs)

    def intercept(self, name: str, around: Callable[..., Any], **kwargs: Any) -> Interceptor:
        return self.function(name).install(around, **kwargs)
