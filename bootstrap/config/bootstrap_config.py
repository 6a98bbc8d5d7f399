import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from configs.settings import KindlingSettings
from core.runtime_config import RuntimeConfig
from domain.host import HostInfo


@dataclass
class BootstrapConfig:
    """Configuration for bootstrap process."""
    host: HostInfo
    install_root: Path
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    environ: Optional[Mapping[str, str]] = None
    env: Optional[str] = None
    global_app_config: Optional[Dict[str, Any]] = None
    settings: Optional[KindlingSettings] = None
    init_modules: Optional[Callable[[], Any]] = None
    configure_modules: Optional[Callable[[], Any]] = None
    load_user_config: Optional[Callable[[], Any]] = None
    regenerate_autoloads: Optional[Callable[[Exception], Any]] = None
    native_check: Optional[Callable[[], bool]] = None
    env_file_required: bool = False
    run_lifecycle: bool = True

    @property
    def environment(self) -> Mapping[str, str]:
        """The process environment this bootstrap reads; never mutated."""
        return self.environ if self.environ is not None else os.environ

    @classmethod
    def from_params(cls, host_version: str, install_root: Union[str, Path], **kwargs) -> 'BootstrapConfig':
        """Create BootstrapConfig from parameter dict."""
        host = kwargs.pop('host', None) or HostInfo(
            version=host_version,
            daemon=kwargs.pop('daemon', False),
            debug=kwargs.pop('debug', False),
            builtins=frozenset(kwargs.pop('builtins', ())),
        )
        return cls(
            host=host,
            install_root=Path(install_root),
            runtime=kwargs.get('runtime') or RuntimeConfig(),
            environ=kwargs.get('environ'),
            env=kwargs.get('env'),
            global_app_config=kwargs.get('global_app_config'),
            settings=kwargs.get('settings'),
            init_modules=kwargs.get('init_modules'),
            configure_modules=kwargs.get('configure_modules'),
            load_user_config=kwargs.get('load_user_config'),
            regenerate_autoloads=kwargs.get('regenerate_autoloads'),
            native_check=kwargs.get('native_check'),
            env_file_required=kwargs.get('env_file_required', False),
            run_lifecycle=kwargs.get('run_lifecycle', True),
        )
