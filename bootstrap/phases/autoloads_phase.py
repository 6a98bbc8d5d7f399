from __future__ import annotations
import logging

from .base_phase import BootstrapPhase, PhaseResult
from bootstrap.exceptions import AutoloadError, CoreError, is_fatal
from bootstrap.version_guard import VersionGuard
from infrastructure.autoloads import load_autoloads

logger = logging.getLogger(__name__)


class AutoloadsPhase(BootstrapPhase):
    """
    Loads the generated autoloads file and checks it was built by this host.

    A missing or corrupt file is recoverable: the error is recorded and handed
    to the ``regenerate_autoloads`` collaborator when one is configured. A host
    version that differs from the one the file was built with is fatal.
    """

    def should_skip_phase(self, context):
        if context.directories is None:
            return True, 'no directory set was resolved'
        return False, ''

    def execute(self, context) -> PhaseResult:
        path = context.directories.autoloads_file
        try:
            manifest = load_autoloads(path)
        except AutoloadError as e:
            context.record_error(e)
            warnings = [f'Autoloads unavailable: {e.message}']
            regenerated = self._regenerate(context, e, warnings)
            return PhaseResult.success_result(
                message='Continuing without autoloads',
                warnings=warnings,
                metadata={'autoloads_file': path, 'loaded': False, 'regenerated': regenerated}
            )

        settings = context.settings
        guard = VersionGuard(
            app_name=settings.app_name,
            binary_path=context.host.binary_path,
            install_docs=settings.install_docs,
            sync_command=settings.sync_command,
            env_prefix=settings.env_prefix,
        )
        guard.check_build_consistency(manifest.host_version, context.host.version)
        context.autoloads = manifest
        return PhaseResult.success_result(
            message=f'Loaded {len(manifest.autoloads)} autoload(s)',
            metadata={'autoloads_file': path, 'loaded': True, 'built_with': manifest.host_version}
        )

    def _regenerate(self, context, error: AutoloadError, warnings) -> bool:
        regenerate = context.config.regenerate_autoloads
        if regenerate is None:
            warnings.append(f'Run `{context.settings.sync_command}` to regenerate {error.path}')
            return False
        try:
            regenerate(error)
        except Exception as e:
            if is_fatal(e):
                raise
            failure = e if isinstance(e, CoreError) else AutoloadError(
                f'Regenerating autoloads failed: {e}', error.path, cause=e)
            context.record_error(failure)
            warnings.append(f'Regeneration failed: {e}')
            return False
        logger.info(f'Autoloads regeneration requested for {error.path}')
        return True
