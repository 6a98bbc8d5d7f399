from __future__ import annotations
from typing import List, Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bootstrap.signals.lifecycle_hooks import LIFECYCLE_ORDER
from domain.host import parse_version

__all__: Sequence[str] = ('OptimizerSettings', 'KindlingSettings')


class OptimizerSettings(BaseModel):
    enabled: bool = Field(default=True, description='Apply startup overrides at all.')
    required_path_handler: str = Field(default='compressed_file_handler', description='Only path handler kept active while booting.')
    path_handlers_restore_priority: int = Field(default=101, description='Priority of the path handler merge at post-process-init.')
    early_load_suffixes: List[str] = Field(default_factory=lambda: ['.pyc', '.py'], description='Load suffixes accepted before the module system takes over.')

    model_config = ConfigDict(extra='forbid', validate_assignment=True)


class KindlingSettings(BaseModel):
    env: str = Field(default='default', description='Configuration environment that produced these settings.')
    app_name: str = Field(default='kindling', min_length=1, description='Directory name used under XDG config and in the legacy dotdir.')
    env_prefix: str = Field(default='KINDLING', min_length=1, description='Prefix for every environment variable Kindling reads.')
    minimum_host_version: str = Field(default='27.1', description='Oldest host major.minor that can boot.')
    install_docs: str = Field(default='docs/getting_started.md#install', description='Where users are sent when the host is too old.')
    sync_command: str = Field(default='kindling sync', description='Command that regenerates cached artifacts.')
    init_file_extension: str = Field(default='yaml', description='Extension of the generated autoloads file.')
    fatal_hook_points: List[str] = Field(default_factory=list, description='Hook points whose failures abort the bootstrap.')
    log_level: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'] = 'INFO'
    optimizer: OptimizerSettings = Field(default_factory=OptimizerSettings)

    model_config = ConfigDict(extra='forbid', validate_assignment=True)

    @field_validator('minimum_host_version')
    @classmethod
    def _validate_minimum_host_version(cls, v: str) -> str:
        parse_version(v)
        return v

    @field_validator('fatal_hook_points')
    @classmethod
    def _validate_fatal_hook_points(cls, v: List[str]) -> List[str]:
        unknown = [name for name in v if name not in LIFECYCLE_ORDER]
        if unknown:
            raise ValueError(f"unknown hook point(s) {unknown}; expected one of {list(LIFECYCLE_ORDER)}")
        return v

    @field_validator('init_file_extension')
    @classmethod
    def _strip_extension_dot(cls, v: str) -> str:
        return v.lstrip('.')
