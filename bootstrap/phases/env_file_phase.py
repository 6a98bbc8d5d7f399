from __future__ import annotations
import logging

from .base_phase import BootstrapPhase, PhaseResult
from configs.env_file import exec_path_from, load_env_file, merge_environment

logger = logging.getLogger(__name__)

OWNER = 'env_file'
PROCESS_ENVIRONMENT = 'process_environment'
EXEC_PATH = 'exec_path'


class EnvFilePhase(BootstrapPhase):

    def should_skip_phase(self, context):
        if context.directories is None:
            return True, 'no directory set was resolved'
        return False, ''

    def execute(self, context) -> PhaseResult:
        runtime = context.runtime
        values = load_env_file(
            context.directories.env_file,
            noerror=not context.config.env_file_required,
            generate_command=f'{context.settings.app_name} env',
        )
        base = runtime.get(PROCESS_ENVIRONMENT, context.config.environment)
        merged = merge_environment(base, values)
        context.environment = merged
        if values:
            runtime.set(PROCESS_ENVIRONMENT, merged, owner=OWNER)
            runtime.set(EXEC_PATH, exec_path_from(merged), owner=OWNER)
        return PhaseResult.success_result(
            message=f'Loaded {len(values)} variable(s) from env file',
            metadata={'env_file': context.directories.env_file, 'variables': sorted(values)}
        )
