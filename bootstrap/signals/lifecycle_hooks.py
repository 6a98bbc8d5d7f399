from __future__ import annotations
from typing import Iterable, Tuple

from core.hooks import HookSequencer

PRE_MODULE_INIT = 'pre-module-init'
POST_MODULE_INIT = 'post-module-init'
PRE_MODULE_CONFIG = 'pre-module-config'
POST_MODULE_CONFIG = 'post-module-config'
POST_USER_CONFIG = 'post-user-config'
POST_PROCESS_INIT = 'post-process-init'
POST_UI_READY = 'post-ui-ready'

LIFECYCLE_ORDER: Tuple[str, ...] = (
    PRE_MODULE_INIT,
    POST_MODULE_INIT,
    PRE_MODULE_CONFIG,
    POST_MODULE_CONFIG,
    POST_USER_CONFIG,
    POST_PROCESS_INIT,
    POST_UI_READY,
)
MODULE_HOOKS = {PRE_MODULE_INIT, POST_MODULE_INIT, PRE_MODULE_CONFIG, POST_MODULE_CONFIG}
STARTUP_HOOKS = {POST_USER_CONFIG, POST_PROCESS_INIT, POST_UI_READY}


def is_lifecycle_hook(name: str) -> bool:
    return name in LIFECYCLE_ORDER


def get_hook_category(name: str) -> str:
    if name in MODULE_HOOKS:
        return 'module'
    elif name in STARTUP_HOOKS:
        return 'startup'
    else:
        return 'unknown'


def hook_position(name: str) -> int:
    return LIFECYCLE_ORDER.index(name)


def create_lifecycle_sequencer(fatal_points: Iterable[str] = ()) -> HookSequencer:
    return HookSequencer(LIFECYCLE_ORDER, fatal_points=fatal_points)
