from __future__ import annotations
import logging

from .base_phase import BootstrapPhase, PhaseResult
from bootstrap.version_guard import VersionGuard

logger = logging.getLogger(__name__)


class VersionCheckPhase(BootstrapPhase):
    """Refuses to boot on a host older than ``settings.minimum_host_version``."""

    def execute(self, context) -> PhaseResult:
        settings = context.settings
        host = context.host
        guard = VersionGuard(
            app_name=settings.app_name,
            binary_path=host.binary_path,
            install_docs=settings.install_docs,
            sync_command=settings.sync_command,
            env_prefix=settings.env_prefix,
        )
        guard.check(host.version, settings.minimum_host_version)
        return PhaseResult.success_result(
            message=f'Host {host.version} satisfies minimum {settings.minimum_host_version}',
            metadata={'host_version': host.version, 'minimum_host_version': settings.minimum_host_version}
        )
