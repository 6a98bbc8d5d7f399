from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bootstrap.exceptions import AutoloadError

__all__ = ['AutoloadsManifest', 'load_autoloads']
logger = logging.getLogger(__name__)


class AutoloadsManifest(BaseModel):
    host_version: str = Field(..., min_length=1, description='Host version the file was generated with.')
    profile: Optional[str] = Field(default=None, description='Profile the file belongs to, None in legacy mode.')
    generated_at: Optional[datetime] = None
    autoloads: Dict[str, str] = Field(default_factory=dict, description='Symbol -> module that defines it.')

    model_config = ConfigDict(extra='ignore')


def load_autoloads(path: Union[str, Path]) -> AutoloadsManifest:
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError as e:
        raise AutoloadError('Autoloads file is missing', str(path), cause=e) from e
    except OSError as e:
        raise AutoloadError(f'Autoloads file is unreadable: {e}', str(path), cause=e) from e
    except UnicodeDecodeError as e:
        raise AutoloadError('Autoloads file is corrupt: not valid UTF-8', str(path), cause=e) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise AutoloadError('Autoloads file is not valid YAML', str(path), cause=e) from e
    if not isinstance(data, dict):
        raise AutoloadError('Autoloads file does not contain a mapping', str(path))

    try:
        manifest = AutoloadsManifest.model_validate(data)
    except ValidationError as e:
        raise AutoloadError(f'Autoloads file is corrupt: {e.error_count()} invalid field(s)', str(path), cause=e) from e

    logger.debug(f'Loaded {len(manifest.autoloads)} autoload(s) from {path} (host {manifest.host_version})')
    return manifest
