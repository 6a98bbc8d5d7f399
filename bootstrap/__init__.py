# kindling/bootstrap/__init__.py
from __future__ import annotations

import importlib

# Exceptions load eagerly; core/, configs/ and infrastructure/ import them
# while this package is still initializing, so everything else is lazy.
from .exceptions import *
from .exceptions import __all__ as _exception_names

__version__ = '0.4.0'
__description__ = 'Kindling – staged bootstrap and configuration resolution'

_LAZY_EXPORTS = {
    'BootstrapOrchestrator': 'bootstrap.main',
    'bootstrap': 'bootstrap.main',
    'bootstrap_kindling': 'bootstrap.main',
    'BootstrapConfig': 'bootstrap.config.bootstrap_config',
    'BootstrapContext': 'bootstrap.bootstrap_context',
    'BootstrapPhaseExecutor': 'bootstrap.core.phase_executor',
    'PhaseExecutionResult': 'bootstrap.core.phase_executor',
    'PhaseExecutionSummary': 'bootstrap.core.phase_executor',
    'BootstrapResult': 'bootstrap.result_builder',
    'BootstrapResultBuilder': 'bootstrap.result_builder',
    'BootstrapOptimizer': 'bootstrap.optimizer',
    'VersionGuard': 'bootstrap.version_guard',
}


def __getattr__(name):
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'bootstrap' has no attribute '{name}'")
    value = getattr(importlib.import_module(module_name), name)
    globals()[name] = value
    return value


__all__ = list(_exception_names) + list(_LAZY_EXPORTS) + ['__version__', '__description__']
