"""
Bootstrap result for Kindling.

Packages what a finished bootstrap produced: settings, resolved directories,
detected capabilities, the live hook sequencer (collaborators keep
registering on it) and every non-fatal error recorded along the way.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class BootstrapResult:
    def __init__(
        self,
        context,
        summary=None,
        bootstrap_duration: Optional[float] = None,
    ):
        self.context = context
        self.summary = summary
        self.run_id: str = context.run_id
        self.bootstrap_duration = bootstrap_duration
        self.creation_time = datetime.now(timezone.utc)

    @property
    def settings(self):
        return self.context.settings

    @property
    def runtime(self):
        return self.context.runtime

    @property
    def sequencer(self):
        return self.context.sequencer

    @property
    def optimizer(self):
        return self.context.optimizer

    @property
    def directories(self):
        return self.context.directories

    @property
    def capabilities(self):
        return self.context.capabilities

    @property
    def deprecated_flags(self):
        return self.context.deprecated_flags

    @property
    def errors(self) -> List[Exception]:
        return self.context.all_errors

    @property
    def success(self) -> bool:
        """True when no error was recorded and no phase failed."""
        if self.summary is not None and self.summary.failed_phases:
            return False
        return not self.errors

    def get_summary(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'success': self.success,
            'env': self.settings.env,
            'profile': str(self.directories.profile) if self.directories and self.directories.profile else None,
            'capabilities': [c.value for c in self.capabilities] if self.capabilities else [],
            'hooks_fired': self.sequencer.fired,
            'pending_overrides': [o.name for o in self.optimizer.pending()],
            'error_count': len(self.errors),
            'bootstrap_duration': self.bootstrap_duration,
            'creation_time': self.creation_time.isoformat(),
        }

    def __repr__(self) -> str:
        return f"BootstrapResult(run_id='{self.run_id}', success={self.success}, errors={len(self.errors)})"


class BootstrapResultBuilder:
    def __init__(self, context):
        self.context = context
        self._summary = None
        self._duration: Optional[float] = None

    def with_summary(self, summary) -> 'BootstrapResultBuilder':
        self._summary = summary
        return self

    def with_duration(self, seconds: float) -> 'BootstrapResultBuilder':
        self._duration = seconds
        return self

    def build(self) -> BootstrapResult:
        result = BootstrapResult(self.context, summary=self._summary, bootstrap_duration=self._duration)
        logger.info(f"Bootstrap completed: {result.get_summary()}")
        if not result.success:
            logger.warning(f"Bootstrap completed with {len(result.errors)} isolated error(s):")
            for error in result.errors:
                logger.warning(f"  - {type(error).__name__}: {error.message}")
        return result
