from __future__ import annotations
import logging

from .base_phase import BootstrapPhase, PhaseResult
from infrastructure.feature_flags import CAPABILITY_PROBES, Capability, DeprecatedFlags, FeatureDetector

logger = logging.getLogger(__name__)

NATIVE_CHECK = CAPABILITY_PROBES[Capability.NATIVE_COMPILATION]


class CapabilityDetectionPhase(BootstrapPhase):
    """
    Probes host capabilities on the first bootstrap against a runtime.

    The detector and the deprecated-flag shim live on the runtime, so a later
    bootstrap in the same process reuses the first answer and the one-time
    deprecation warnings stay one-time.
    """

    def execute(self, context) -> PhaseResult:
        runtime = context.runtime
        cached = runtime.feature_detector is not None
        if not cached:
            runtime.feature_detector = self._create_detector(context)

        capabilities = runtime.feature_detector.detect()
        if runtime.deprecated_flags is None:
            runtime.deprecated_flags = DeprecatedFlags(capabilities)

        context.capabilities = capabilities
        context.deprecated_flags = runtime.deprecated_flags
        verb = 'Reused' if cached else 'Detected'
        return PhaseResult.success_result(
            message=f'{verb} {len(capabilities)} host capabilit{"y" if len(capabilities) == 1 else "ies"}',
            metadata={**capabilities.as_dict(), 'cached': cached}
        )

    def _create_detector(self, context) -> FeatureDetector:
        runtime = context.runtime
        native_check = context.config.native_check
        if native_check is None and runtime.has_function(NATIVE_CHECK):
            native_check = lambda: bool(runtime.call(NATIVE_CHECK))
        return FeatureDetector(context.host.has_builtin, native_check=native_check)
