from __future__ import annotations
import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from bootstrap.bootstrap_context import BootstrapContext
from bootstrap.config.bootstrap_config import BootstrapConfig
from bootstrap.core.phase_executor import BootstrapPhaseExecutor
from bootstrap.exceptions import is_fatal
from bootstrap.optimizer import LOAD_USER_CONFIG, BootstrapOptimizer
from bootstrap.phases.autoloads_phase import AutoloadsPhase
from bootstrap.phases.base_phase import BootstrapPhase
from bootstrap.phases.capability_phase import CapabilityDetectionPhase
from bootstrap.phases.env_file_phase import EnvFilePhase
from bootstrap.phases.lifecycle_phase import LifecyclePhase
from bootstrap.phases.optimization_phase import OptimizationPhase
from bootstrap.phases.path_resolution_phase import PathResolutionPhase
from bootstrap.phases.version_check_phase import VersionCheckPhase
from bootstrap.result_builder import BootstrapResult, BootstrapResultBuilder
from bootstrap.signals.lifecycle_hooks import create_lifecycle_sequencer
from configs.config_loader import ConfigLoader
from configs.settings import KindlingSettings

logger = logging.getLogger(__name__)


class BootstrapOrchestrator:
    def __init__(self, config: BootstrapConfig):
        self.config = config
        self.run_id = self._generate_run_id()
        self.start_time: Optional[float] = None
        self.context: Optional[BootstrapContext] = None
        self._phases: Optional[List[BootstrapPhase]] = None
        logger.info(f'BootstrapOrchestrator initialized - run_id: {self.run_id}')

    def execute_bootstrap(self) -> BootstrapResult:
        self.start_time = time.perf_counter()
        logger.info('=== Kindling Bootstrap Starting ===')
        logger.info(f'Run ID: {self.run_id}')
        logger.info(f'Host: {self.config.host.version} ({self.config.host.binary_path})')
        logger.info(f"Environment: {self.config.env or 'default'}")

        settings = self._load_settings()
        self.context = self._create_bootstrap_context(settings)
        executor = BootstrapPhaseExecutor(self.context)
        try:
            summary = executor.execute_phases(self._get_phases())
        except Exception as e:
            self._handle_bootstrap_failure(e)
            raise
        return self._build_result(summary)

    def _load_settings(self) -> KindlingSettings:
        if self.config.settings is not None:
            return self.config.settings
        loader = ConfigLoader(environ=self.config.environment)
        settings = loader.load_settings(env=self.config.env, overrides=self.config.global_app_config)
        logger.info(f"Settings loaded for env: {settings.env}")
        return settings

    def _create_bootstrap_context(self, settings: KindlingSettings) -> BootstrapContext:
        runtime = self.config.runtime
        if self.config.load_user_config is not None and not runtime.has_function(LOAD_USER_CONFIG):
            runtime.define(LOAD_USER_CONFIG, self.config.load_user_config)
        sequencer = create_lifecycle_sequencer(settings.fatal_hook_points)
        optimizer = BootstrapOptimizer(runtime, sequencer, settings.optimizer)
        logger.debug('Bootstrap context created')
        return BootstrapContext(
            config=self.config,
            run_id=self.run_id,
            settings=settings,
            sequencer=sequencer,
            optimizer=optimizer,
        )

    def _handle_bootstrap_failure(self, error: Exception) -> None:
        kind = 'Fatal' if is_fatal(error) else 'Unexpected'
        logger.critical(f'{kind} bootstrap failure: {error}')
        # Nothing applied may outlive an aborted sequence.
        self.context.optimizer.restore_pending(f'aborted: {type(error).__name__}')

    def _build_result(self, summary) -> BootstrapResult:
        duration = self._get_elapsed_seconds()
        result = BootstrapResultBuilder(self.context).with_summary(summary).with_duration(duration).build()
        if result.success:
            logger.info(f'✓ Kindling Bootstrap Complete. Run ID: {result.run_id}. Duration: {duration:.2f}s')
        else:
            logger.error(f'✗ Kindling Bootstrap finished with {len(result.errors)} error(s). Run ID: {result.run_id}')
        return result

    def _get_phases(self) -> List[BootstrapPhase]:
        if self._phases is None:
            self._phases = [
                VersionCheckPhase(),
                PathResolutionPhase(),
                CapabilityDetectionPhase(),
                AutoloadsPhase(),
                EnvFilePhase(),
                OptimizationPhase(),
                LifecyclePhase(),
            ]
        return self._phases

    def _generate_run_id(self) -> str:
        timestamp = datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')
        return f'bootstrap_run_{timestamp}_{os.getpid()}'

    def _get_elapsed_seconds(self) -> float:
        if self.start_time is None:
            return 0.0
        return time.perf_counter() - self.start_time


def bootstrap(config: BootstrapConfig) -> BootstrapResult:
    return BootstrapOrchestrator(config).execute_bootstrap()


def bootstrap_kindling(host_version: str, install_root: Union[str, Path], **kwargs) -> BootstrapResult:
    """
    Build a ``BootstrapConfig`` from keyword parameters and run it.

    Raises ``VersionError`` or a fatal ``CoreError`` when the sequence aborts;
    every other failure is isolated and listed in ``result.errors``.
    """
    config = BootstrapConfig.from_params(host_version, install_root, **kwargs)
    return bootstrap(config)
