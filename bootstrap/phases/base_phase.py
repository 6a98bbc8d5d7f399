"""
Base Phase - Abstract interface for all bootstrap phases.

Defines the common contract shared by every bootstrap phase. Phases run
synchronously and in a fixed order; a phase turns non-fatal errors into a
failed ``PhaseResult`` and lets fatal ones propagate to the executor.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from bootstrap.exceptions import CoreError, is_fatal

if TYPE_CHECKING:
    from bootstrap.bootstrap_context import BootstrapContext

logger = logging.getLogger(__name__)


@dataclass
class PhaseResult:
    """Result of a bootstrap phase execution."""
    success: bool
    message: str
    errors: List[str]
    warnings: List[str]
    metadata: Dict[str, Any]

    @classmethod
    def success_result(
        cls,
        message: str,
        warnings: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> 'PhaseResult':
        """Create a successful phase result."""
        return cls(
            success=True,
            message=message,
            errors=[],
            warnings=warnings or [],
            metadata=metadata or {}
        )

    @classmethod
    def failure_result(
        cls,
        message: str,
        errors: List[str],
        warnings: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> 'PhaseResult':
        """Create a failed phase result."""
        return cls(
            success=False,
            message=message,
            errors=errors,
            warnings=warnings or [],
            metadata=metadata or {}
        )

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def add_error(self, error: str) -> None:
        self.errors.append(error)
        self.success = False


class BootstrapPhase(ABC):
    """
    Abstract base class for all bootstrap phases.

    Subclasses implement ``execute``; the executor calls
    ``execute_with_hooks``, which adds validation, skip handling, logging
    and error classification around it.
    """

    REQUIRED_CONTEXT: Tuple[str, ...] = ('config', 'run_id', 'settings', 'sequencer')

    def __init__(self):
        self.phase_name = self.__class__.__name__
        self.logger = logging.getLogger(f"bootstrap.{self.phase_name.lower()}")

    @abstractmethod
    def execute(self, context: BootstrapContext) -> PhaseResult:
        """
        Execute this bootstrap phase.

        Args:
            context: BootstrapContext containing shared state

        Returns:
            PhaseResult indicating success/failure and any warnings/errors
        """

    def pre_execute(self, context: BootstrapContext) -> None:
        self.logger.debug(f"Starting phase: {self.phase_name}")

    def post_execute(self, context: BootstrapContext, result: PhaseResult) -> None:
        if result.success:
            self.logger.info(f"✓ Phase completed: {self.phase_name} - {result.message}")
        else:
            self.logger.error(f"✗ Phase failed: {self.phase_name} - {result.message}")
            for error in result.errors:
                self.logger.error(f"  Error: {error}")

        for warning in result.warnings:
            self.logger.warning(f"  Warning: {warning}")

    def validate_context(self, context: BootstrapContext) -> None:
        """Raises ValueError if the context lacks what this phase reads."""
        for attr in self.REQUIRED_CONTEXT:
            if getattr(context, attr, None) is None:
                raise ValueError(f"BootstrapContext missing required attribute: {attr}")

    def should_skip_phase(self, context: BootstrapContext) -> Tuple[bool, str]:
        """
        Determine if this phase should be skipped.

        Returns:
            (should_skip, reason) tuple
        """
        return False, ""

    def execute_with_hooks(self, context: BootstrapContext) -> PhaseResult:
        """
        Execute phase with pre/post hooks and error handling.

        Fatal errors (see ``is_fatal``) propagate unchanged. Anything else
        is recorded on the context, wrapped in a ``CoreError`` when it is not
        one already, and the phase reports a failed result.
        """
        self.validate_context(context)

        should_skip, skip_reason = self.should_skip_phase(context)
        if should_skip:
            self.logger.info(f"Skipping phase {self.phase_name}: {skip_reason}")
            return PhaseResult.success_result(
                message=f"Phase skipped: {skip_reason}",
                metadata={'skipped': True, 'skip_reason': skip_reason}
            )

        self.pre_execute(context)
        try:
            result = self.execute(context)
        except Exception as e:
            if is_fatal(e):
                self.logger.critical(f"Fatal error in phase {self.phase_name}: {e}")
                raise
            if isinstance(e, CoreError):
                recorded = e
                error_msg = str(e)
            else:
                error_msg = f"Unexpected error in phase {self.phase_name}: {e}"
                self.logger.error(error_msg, exc_info=True)
                recorded = CoreError(error_msg, cause=e, phase=self.phase_name)
            context.record_error(recorded)
            result = PhaseResult.failure_result(
                message=f"Phase {self.phase_name} failed with exception",
                errors=[error_msg],
                metadata={'exception': type(e).__name__, 'phase_name': self.phase_name}
            )

        self.post_execute(context, result)
        return result
