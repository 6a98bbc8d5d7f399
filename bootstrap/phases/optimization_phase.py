from __future__ import annotations
import logging

from .base_phase import BootstrapPhase, PhaseResult

logger = logging.getLogger(__name__)


class OptimizationPhase(BootstrapPhase):
    """Applies the startup overrides; each one already has its restore registered."""

    def should_skip_phase(self, context):
        return context.optimizer.should_skip(context.host)

    def execute(self, context) -> PhaseResult:
        applied = context.optimizer.apply(context.host)
        return PhaseResult.success_result(
            message=f'Applied {len(applied)} startup override(s)',
            metadata={o.name: o.restore_hook for o in applied}
        )
