"""
Temporary startup overrides of runtime state.

Each override snapshots the variables it touches, registers its single
restore action at a lifecycle hook point, and only then mutates the runtime.
Restore actions are idempotent, so an early restore (from an interceptor or
an aborted bootstrap) and the later hook firing never restore twice.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from bootstrap.exceptions import CoreError
from bootstrap.signals.lifecycle_hooks import POST_PROCESS_INIT, POST_UI_READY, POST_USER_CONFIG, PRE_MODULE_INIT
from configs.settings import OptimizerSettings
from core.hooks import HookSequencer
from core.interceptors import ignore
from core.runtime_config import RuntimeConfig
from domain.host import HostInfo

logger = logging.getLogger(__name__)

OWNER = 'optimizer'

PATH_HANDLERS = 'path_handlers'
INHIBIT_REDISPLAY = 'inhibit_redisplay'
INHIBIT_MESSAGE = 'inhibit_message'
LOAD_SUFFIXES = 'load_suffixes'
TOOLBAR_ENABLED = 'toolbar_enabled'
LOAD_USER_CONFIG = 'load_user_config'
SETUP_TOOLBAR = 'setup_toolbar'
REDRAW = 'redraw'


@dataclass(eq=False)
class Override:
    name: str
    restore_hook: str
    apply: Callable[[RuntimeConfig], None]
    restore: Callable[[RuntimeConfig], None]
    variables: Tuple[str, ...] = ()
    functions: Tuple[str, ...] = ()
    priority: int = 0
    applied: bool = False
    restored: bool = False
    restored_by: Optional[str] = None

    def restore_once(self, runtime: RuntimeConfig, reason: str) -> bool:
        if self.restored or not self.applied:
            return False
        self.restore(runtime)
        self.restored = True
        self.restored_by = reason
        logger.debug(f"Restored override '{self.name}' ({reason})")
        return True

    @property
    def restore_label(self) -> str:
        return f'restore:{self.name}'


def dedupe(items: Sequence[Any]) -> List[Any]:
    seen: List[Any] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


class BootstrapOptimizer:
    def __init__(self, runtime: RuntimeConfig, sequencer: HookSequencer,
                 settings: Optional[OptimizerSettings] = None):
        self.runtime = runtime
        self.sequencer = sequencer
        self.settings = settings or OptimizerSettings()
        self.overrides: List[Override] = []

    def should_skip(self, host: HostInfo) -> Tuple[bool, str]:
        if not self.settings.enabled:
            return True, 'optimizer disabled in settings'
        if host.daemon:
            return True, 'host is running as a daemon'
        if host.debug:
            return True, 'debug mode is enabled'
        return False, ''

    def apply(self, host: HostInfo) -> List[Override]:
        skip, reason = self.should_skip(host)
        if skip:
            logger.info(f'Skipping startup optimizations: {reason}')
            return []
        for override in self._build_overrides():
            self._apply_override(override)
        logger.info(f'Applied {len(self.overrides)} startup override(s)')
        return list(self.overrides)

    def pending(self) -> List[Override]:
        return [o for o in self.overrides if o.applied and not o.restored]

    def restore_pending(self, reason: str) -> List[str]:
        restored = []
        for override in reversed(self.pending()):
            try:
                override.restore_once(self.runtime, reason)
                restored.append(override.name)
            except Exception as e:
                logger.error(f"Failed to restore override '{override.name}' ({reason}): {e}", exc_info=True)
        if restored:
            logger.warning(f'Restored {len(restored)} pending override(s) early: {restored} ({reason})')
        return restored

    def _apply_override(self, override: Override) -> None:
        missing = [name for name in override.variables if name not in self.runtime]
        missing += [name for name in override.functions if not self.runtime.has_function(name)]
        if missing:
            logger.debug(f"Skipping override '{override.name}': runtime lacks {missing}")
            return
        for name in override.variables:
            self.runtime.snapshots.capture(name)

        registered = self.sequencer.register(
            override.restore_hook,
            lambda *_: override.restore_once(self.runtime, f'hook:{override.restore_hook}'),
            priority=override.priority,
            label=override.restore_label,
        )
        if not registered:
            raise CoreError(
                f"Refusing override '{override.name}': its restore hook '{override.restore_hook}' already fired",
                phase='optimization',
            )
        override.apply(self.runtime)
        override.applied = True
        self.overrides.append(override)
        logger.debug(f"Applied override '{override.name}' (restore at {override.restore_hook})")

    def _build_overrides(self) -> List[Override]:
        return [
            self._path_handlers_override(),
            self._redisplay_override(),
            self._load_suffixes_override(),
            self._toolbar_override(),
        ]

    # Path-rewriting handlers run on every file access; only the one needed to
    # read compressed sources stays active while booting.
    def _path_handlers_override(self) -> Override:
        required = self.settings.required_path_handler

        def apply(runtime: RuntimeConfig) -> None:
            original = runtime.get(PATH_HANDLERS)
            runtime.set(PATH_HANDLERS, [entry for entry in original if entry[1] == required][:1], owner=OWNER)

        def restore(runtime: RuntimeConfig) -> None:
            # Handlers added while booting are kept, ahead of the originals.
            current = list(runtime.get(PATH_HANDLERS))
            runtime.set(PATH_HANDLERS, dedupe(current + list(runtime.snapshots.get(PATH_HANDLERS))), owner=OWNER)

        return Override(PATH_HANDLERS, POST_PROCESS_INIT, apply, restore,
                        variables=(PATH_HANDLERS,), priority=self.settings.path_handlers_restore_priority)

    def _redisplay_override(self) -> Override:
        interceptor = None

        def apply(runtime: RuntimeConfig) -> None:
            nonlocal interceptor
            runtime.set(INHIBIT_REDISPLAY, True, owner=OWNER)
            runtime.set(INHIBIT_MESSAGE, True, owner=OWNER)
            if runtime.has_function(LOAD_USER_CONFIG):
                def _restore_after_user_config(next_fn, *args, **kwargs):
                    try:
                        return next_fn(*args, **kwargs)
                    finally:
                        override.restore_once(runtime, f'end of {LOAD_USER_CONFIG}')
                interceptor = runtime.intercept(LOAD_USER_CONFIG, _restore_after_user_config,
                                                label='restore-redisplay')

        def restore(runtime: RuntimeConfig) -> None:
            runtime.set(INHIBIT_REDISPLAY, runtime.snapshots.get(INHIBIT_REDISPLAY), owner=OWNER)
            runtime.set(INHIBIT_MESSAGE, runtime.snapshots.get(INHIBIT_MESSAGE), owner=OWNER)
            if interceptor is not None:
                interceptor.uninstall()
            if runtime.has_function(REDRAW):
                runtime.call(REDRAW)

        override = Override('redisplay', POST_USER_CONFIG, apply, restore,
                            variables=(INHIBIT_REDISPLAY, INHIBIT_MESSAGE))
        return override

    # The module system owns load_suffixes from here on and restores it first.
    def _load_suffixes_override(self) -> Override:
        early = list(self.settings.early_load_suffixes)

        def apply(runtime: RuntimeConfig) -> None:
            original = runtime.get(LOAD_SUFFIXES)
            runtime.set(LOAD_SUFFIXES, [s for s in original if s in early], owner=OWNER)

        def restore(runtime: RuntimeConfig) -> None:
            runtime.set(LOAD_SUFFIXES, list(runtime.snapshots.get(LOAD_SUFFIXES)), owner=OWNER)

        return Override(LOAD_SUFFIXES, PRE_MODULE_INIT, apply, restore,
                        variables=(LOAD_SUFFIXES,), priority=-100)

    def _toolbar_override(self) -> Override:
        interceptor = None

        def apply(runtime: RuntimeConfig) -> None:
            nonlocal interceptor
            interceptor = runtime.function(SETUP_TOOLBAR).install_override(ignore, label='defer-toolbar')

        def restore(runtime: RuntimeConfig) -> None:
            interceptor.uninstall()
            if runtime.get(TOOLBAR_ENABLED, False):
                runtime.call(SETUP_TOOLBAR)

        return Override(SETUP_TOOLBAR, POST_UI_READY, apply, restore, functions=(SETUP_TOOLBAR,))
