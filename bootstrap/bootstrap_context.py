from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bootstrap.config.bootstrap_config import BootstrapConfig
from bootstrap.exceptions import CoreError
from bootstrap.optimizer import BootstrapOptimizer
from configs.path_resolver import DirectorySet
from configs.settings import KindlingSettings
from core.hooks import HookSequencer
from core.runtime_config import RuntimeConfig
from domain.host import HostInfo
from infrastructure.autoloads import AutoloadsManifest
from infrastructure.feature_flags import CapabilitySet, DeprecatedFlags

logger = logging.getLogger(__name__)


@dataclass
class BootstrapContext:
    config: BootstrapConfig
    run_id: str
    settings: KindlingSettings
    sequencer: HookSequencer
    optimizer: BootstrapOptimizer
    directories: Optional[DirectorySet] = None
    capabilities: Optional[CapabilitySet] = None
    deprecated_flags: Optional[DeprecatedFlags] = None
    autoloads: Optional[AutoloadsManifest] = None
    environment: Dict[str, str] = field(default_factory=dict)
    errors: List[CoreError] = field(default_factory=list)

    @property
    def host(self) -> HostInfo:
        return self.config.host

    @property
    def runtime(self) -> RuntimeConfig:
        return self.config.runtime

    def record_error(self, error: CoreError) -> None:
        logger.error(f'Recorded non-fatal {type(error).__name__}: {error.message}')
        self.errors.append(error)

    @property
    def all_errors(self) -> List[CoreError]:
        return self.errors + self.sequencer.errors
