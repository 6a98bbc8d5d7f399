"""
Bootstrap Phase Executor - Consistent phase execution with proper error handling.

Runs phases in order with timing and a summary log. Non-fatal failures are
reported and the next phase runs; a fatal error stops execution, is recorded
in the summary and propagates to the caller.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from bootstrap.exceptions import is_fatal

if TYPE_CHECKING:
    from bootstrap.bootstrap_context import BootstrapContext
    from bootstrap.phases.base_phase import BootstrapPhase

logger = logging.getLogger(__name__)


@dataclass
class PhaseExecutionResult:
    """Result of executing a bootstrap phase."""
    phase_name: str
    success: bool
    duration_seconds: float
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None

    @property
    def is_critical_failure(self) -> bool:
        return not self.success and self.exception is not None and is_fatal(self.exception)

    @property
    def skipped(self) -> bool:
        return bool(self.metadata.get('skipped'))


@dataclass
class PhaseExecutionSummary:
    """Summary of all phase executions."""
    total_phases: int
    successful_phases: int
    failed_phases: int
    total_duration: float
    results: List[PhaseExecutionResult] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.total_phases == 0:
            return 100.0
        return (self.successful_phases / self.total_phases) * 100.0

    @property
    def has_critical_failures(self) -> bool:
        return any(result.is_critical_failure for result in self.results)


class BootstrapPhaseExecutor:
    def __init__(self, context: BootstrapContext):
        self.context = context
        self.execution_results: List[PhaseExecutionResult] = []
        self.summary: Optional[PhaseExecutionSummary] = None

    def execute_phases(self, phases: List[BootstrapPhase]) -> PhaseExecutionSummary:
        """
        Execute all phases in order.

        Raises whatever fatal error a phase raised, after logging the summary
        of the phases that did run.
        """
        logger.info(f'Executing {len(phases)} bootstrap phases')
        start = time.perf_counter()

        try:
            for i, phase in enumerate(phases, 1):
                phase_name = phase.__class__.__name__
                logger.info(f'Phase {i}/{len(phases)}: {phase_name}')
                result = self._execute_single_phase(phase)
                self.execution_results.append(result)
                if result.success:
                    logger.info(f'✓ Phase {phase_name} completed in {result.duration_seconds:.2f}s')
                else:
                    logger.warning(f'✗ Phase {phase_name} failed after {result.duration_seconds:.2f}s; continuing')
        finally:
            self.summary = self._summarize(len(phases), time.perf_counter() - start)
            self._log_execution_summary(self.summary)

        return self.summary

    def _execute_single_phase(self, phase: BootstrapPhase) -> PhaseExecutionResult:
        phase_name = phase.__class__.__name__
        start = time.perf_counter()
        try:
            phase_result = phase.execute_with_hooks(self.context)
        except Exception as e:
            self.execution_results.append(PhaseExecutionResult(
                phase_name=phase_name,
                success=False,
                duration_seconds=time.perf_counter() - start,
                errors=[str(e)],
                exception=e,
                metadata={'exception_type': type(e).__name__}
            ))
            raise
        return PhaseExecutionResult(
            phase_name=phase_name,
            success=phase_result.success,
            duration_seconds=time.perf_counter() - start,
            errors=list(phase_result.errors),
            warnings=list(phase_result.warnings),
            metadata=dict(phase_result.metadata)
        )

    def _summarize(self, total_phases: int, duration: float) -> PhaseExecutionSummary:
        successful = sum(1 for r in self.execution_results if r.success)
        return PhaseExecutionSummary(
            total_phases=total_phases,
            successful_phases=successful,
            failed_phases=len(self.execution_results) - successful,
            total_duration=duration,
            results=list(self.execution_results)
        )

    def _log_execution_summary(self, summary: PhaseExecutionSummary) -> None:
        logger.info('=== Bootstrap Phase Execution Summary ===')
        logger.info(f'Total phases: {summary.total_phases}')
        logger.info(f'Executed: {len(summary.results)}')
        logger.info(f'Successful: {summary.successful_phases}')
        logger.info(f'Failed: {summary.failed_phases}')
        logger.info(f'Success rate: {summary.success_rate:.1f}%')
        logger.info(f'Total duration: {summary.total_duration:.2f}s')

        if summary.failed_phases > 0:
            logger.warning('Failed phases:')
            for result in summary.results:
                if not result.success:
                    logger.warning(f'  - {result.phase_name}: {result.errors}')

        logger.info('=== End Bootstrap Phase Summary ===')

