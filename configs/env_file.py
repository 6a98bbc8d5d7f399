from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from dotenv import dotenv_values

from bootstrap.exceptions import UserError

__all__ = ['load_env_file', 'merge_environment', 'exec_path_from']
logger = logging.getLogger(__name__)


def load_env_file(path: Union[str, Path], *, noerror: bool = True,
                  generate_command: str = 'kindling env') -> Dict[str, str]:
    """Read a KEY=VALUE env file. Values are taken literally, never interpolated."""
    path = Path(path)
    if not path.is_file():
        if noerror:
            logger.debug(f'No env file at {path}')
            return {}
        raise UserError(
            f"Couldn't find the env file at {path}",
            remediation=f'Generate one with:\n\n  {generate_command}',
        )
    values = dotenv_values(path, interpolate=False)
    loaded = {key: value for key, value in values.items() if value is not None}
    logger.info(f'Loaded {len(loaded)} variable(s) from env file {path}')
    return loaded


def merge_environment(base: Optional[Mapping[str, str]], loaded: Mapping[str, str]) -> Dict[str, str]:
    merged = dict(base or {})
    merged.update(loaded)
    return merged


def exec_path_from(environment: Mapping[str, str]) -> List[str]:
    return [entry for entry in environment.get('PATH', '').split(os.pathsep) if entry]
