from __future__ import annotations
import logging

from .base_phase import BootstrapPhase, PhaseResult
from configs.path_resolver import PathResolver

logger = logging.getLogger(__name__)


def build_path_resolver(context) -> PathResolver:
    settings = context.settings
    return PathResolver(
        str(context.config.install_root),
        app_name=settings.app_name,
        env_prefix=settings.env_prefix,
        host_version=context.host.major_minor,
        init_file_extension=settings.init_file_extension,
    )


class PathResolutionPhase(BootstrapPhase):
    """
    Resolves the directory set from the environment.

    An unparseable profile raises a fatal ProfileError out of this phase;
    every later phase that touches the filesystem skips when no directory
    set was produced.
    """

    def execute(self, context) -> PhaseResult:
        directories = build_path_resolver(context).resolve(context.config.environment)
        context.directories = directories
        mode = f'profile {directories.profile}' if directories.profile_active else 'legacy layout'
        return PhaseResult.success_result(
            message=f'Resolved directories ({mode})',
            metadata=directories.as_dict()
        )
