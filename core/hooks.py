"""
Hook points and the sequencer that fires them.

A hook point collects ``(priority, callback)`` registrations and fires them
exactly once, synchronously, lowest priority first with ties kept in
registration order. The sequencer owns a fixed ordered set of hook points
and isolates failures per point unless a point is designated fatal.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from bootstrap.exceptions import CoreError, HookError, is_fatal

__all__ = ['HookState', 'HookRegistration', 'HookPoint', 'HookSequencer']
logger = logging.getLogger(__name__)


class HookState(Enum):
    EMPTY = 'EMPTY'
    REGISTERED = 'REGISTERED'
    FIRED = 'FIRED'


@dataclass(frozen=True)
class HookRegistration:
    priority: int
    sequence: int
    callback: Callable[..., Any]
    label: str


class HookPoint:
    _sequence = itertools.count()

    def __init__(self, name: str, *, fatal: bool = False):
        self.name = name
        self.fatal = fatal
        self.state = HookState.EMPTY
        self._registrations: List[HookRegistration] = []

    def register(self, callback: Callable[..., Any], priority: int = 0, label: Optional[str] = None) -> bool:
        if self.state is HookState.FIRED:
            logger.warning(
                f"Ignoring registration of '{label or getattr(callback, '__name__', callback)}' "
                f"on hook '{self.name}': it has already fired (likely a defect)"
            )
            return False
        registration = HookRegistration(
            priority=priority,
            sequence=next(self._sequence),
            callback=callback,
            label=label or getattr(callback, '__name__', repr(callback)),
        )
        self._registrations.append(registration)
        self.state = HookState.REGISTERED
        logger.debug(f"Registered '{registration.label}' on hook '{self.name}' (priority={priority})")
        return True

    @property
    def registrations(self) -> List[HookRegistration]:
        return sorted(self._registrations, key=lambda r: (r.priority, r.sequence))

    @property
    def fired(self) -> bool:
        return self.state is HookState.FIRED

    def fire(self, *args: Any) -> int:
        """
        Run every registered callback once.

        All callbacks run even when one raises, so restorations sharing the
        point are not skipped; the first error is then raised as a HookError.
        Returns the number of callbacks executed.
        """
        if self.state is HookState.FIRED:
            logger.warning(f"Hook '{self.name}' fired twice; no callbacks re-run")
            return 0

        registrations = self.registrations
        self.state = HookState.FIRED
        errors: List[BaseException] = []
        for registration in registrations:
            try:
                registration.callback(*args)
            except Exception as e:
                logger.error(f"Hook '{self.name}' callback '{registration.label}' failed: {e}", exc_info=True)
                errors.append(e)

        logger.debug(f"Hook '{self.name}' fired {len(registrations)} callback(s)")
        if errors:
            raise HookError(
                f"{len(errors)} of {len(registrations)} callback(s) failed at hook '{self.name}'",
                self.name,
                errors=errors,
                fatal=self.fatal,
            )
        return len(registrations)


class HookSequencer:
    def __init__(self, points: Sequence[str], fatal_points: Iterable[str] = ()):
        fatal = set(fatal_points)
        unknown = fatal.difference(points)
        if unknown:
            raise ValueError(f"Fatal hook points not in sequence: {sorted(unknown)}")
        self._order: List[str] = list(points)
        self._points: Dict[str, HookPoint] = {name: HookPoint(name, fatal=name in fatal) for name in points}
        self.errors: List[CoreError] = []

    @property
    def order(self) -> List[str]:
        return list(self._order)

    @property
    def fired(self) -> List[str]:
        return [name for name in self._order if self._points[name].fired]

    def point(self, name: str) -> HookPoint:
        try:
            return self._points[name]
        except KeyError:
            raise KeyError(f"Unknown hook point: '{name}'") from None

    def register(self, name: str, callback: Callable[..., Any], priority: int = 0,
                 label: Optional[str] = None) -> bool:
        return self.point(name).register(callback, priority=priority, label=label)

    def fire(self, name: str, *args: Any) -> int:
        point = self.point(name)
        pending_before = [n for n in self._order[:self._order.index(name)] if not self._points[n].fired]
        if pending_before and not point.fired:
            logger.warning(f"Hook '{name}' fired before earlier hook(s) {pending_before}")
        try:
            return point.fire(*args)
        except HookError as e:
            return self._handle(e)

    def run(self, bodies: Optional[Mapping[str, Callable[..., Any]]] = None, *args: Any) -> List[str]:
        """
        Fire every unfired hook point in order.

        A body mapped to a point runs just before that point fires; its
        non-fatal errors are isolated the same way hook errors are, and the
        point still fires afterwards.
        """
        bodies = bodies or {}
        for name in self._order:
            point = self._points[name]
            if point.fired:
                continue
            body = bodies.get(name)
            if body is not None:
                self._run_body(name, body, *args)
            self.fire(name, *args)
        return self.fired

    def _run_body(self, name: str, body: Callable[..., Any], *args: Any) -> None:
        try:
            body(*args)
        except CoreError as e:
            if is_fatal(e):
                raise
            logger.error(f"Stage before hook '{name}' failed: {e}")
            self.errors.append(e)
        except Exception as e:
            self._handle(HookError(f"Stage before hook '{name}' failed: {e}", name, errors=[e],
                                   fatal=self._points[name].fatal))

    def _handle(self, error: HookError) -> int:
        if error.fatal:
            logger.critical(f"Fatal hook failure: {error.message}")
            raise error
        logger.error(f"Hook failure isolated to '{error.hook}': {error.message}")
        self.errors.append(error)
        return 0
