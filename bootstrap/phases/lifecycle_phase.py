from __future__ import annotations
import logging
from typing import Any, Callable, Dict

from .base_phase import BootstrapPhase, PhaseResult
from bootstrap.optimizer import LOAD_USER_CONFIG
from bootstrap.signals.lifecycle_hooks import POST_MODULE_CONFIG, POST_MODULE_INIT, POST_USER_CONFIG

logger = logging.getLogger(__name__)


class LifecyclePhase(BootstrapPhase):
    """
    Fires the lifecycle hook points in order.

    Module initialization runs just before ``post-module-init``, module
    configuration before ``post-module-config`` and the user config before
    ``post-user-config``. User config goes through the runtime function when
    one is defined so interceptors installed on it apply.
    """

    def should_skip_phase(self, context):
        if not context.config.run_lifecycle:
            return True, 'lifecycle is driven by the host'
        return False, ''

    def execute(self, context) -> PhaseResult:
        sequencer = context.sequencer
        errors_before = len(sequencer.errors)
        fired = sequencer.run(self._bodies(context))
        new_errors = sequencer.errors[errors_before:]
        metadata = {'fired': fired, 'pending_overrides': [o.name for o in context.optimizer.pending()]}
        if new_errors:
            return PhaseResult.failure_result(
                message=f'{len(new_errors)} hook failure(s) isolated',
                errors=[e.message for e in new_errors],
                metadata=metadata
            )
        return PhaseResult.success_result(message=f'Fired {len(fired)} hook point(s)', metadata=metadata)

    def _bodies(self, context) -> Dict[str, Callable[..., Any]]:
        config = context.config
        runtime = context.runtime
        bodies: Dict[str, Callable[..., Any]] = {}
        if config.init_modules is not None:
            bodies[POST_MODULE_INIT] = config.init_modules
        if config.configure_modules is not None:
            bodies[POST_MODULE_CONFIG] = config.configure_modules
        if runtime.has_function(LOAD_USER_CONFIG):
            bodies[POST_USER_CONFIG] = lambda: runtime.call(LOAD_USER_CONFIG)
        elif config.load_user_config is not None:
            bodies[POST_USER_CONFIG] = config.load_user_config
        return bodies
