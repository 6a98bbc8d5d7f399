from __future__ import annotations
import copy
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Final, Mapping, Optional, Sequence

import yaml
from pydantic import ValidationError

from bootstrap.exceptions import UserError
from configs.config_utils import ConfigMerger
from configs.settings import KindlingSettings

__all__: Sequence[str] = ('ConfigLoader', 'DEFAULT_CONFIG')
logger = logging.getLogger(__name__)

_ENV_DEFAULT: Final[str] = 'default'
_CONFIG_FILE: Final[str] = 'global_app_config.yaml'

DEFAULT_CONFIG: Dict[str, Any] = {
    'env': _ENV_DEFAULT,
}

_RE_ENV_DEFAULT: Final[re.Pattern[str]] = re.compile('\\$\\{([A-Za-z_][A-Za-z0-9_]*):-(.*?)\\}')
_RE_ENV_PLAIN: Final[re.Pattern[str]] = re.compile('\\$\\{([A-Za-z_][A-Za-z0-9_]*)\\}')


def _interpolate_env(value: str, environ: Mapping[str, str]) -> str:
    def _repl(match: re.Match[str]) -> str:
        var, default = (match.group(1), match.group(2))
        return environ.get(var) or default

    before = value
    value = _RE_ENV_DEFAULT.sub(_repl, value)
    value = _RE_ENV_PLAIN.sub(lambda m: environ.get(m.group(1), m.group(0)), value)

    if before != value:
        logger.debug("Env expand: '%s' → '%s'", before, value)
    elif '${' in before:
        logger.warning("Unresolved env var in '%s'", before)
    return value


def _expand_tree(node: Any, environ: Mapping[str, str]) -> Any:
    if isinstance(node, dict):
        return {k: _expand_tree(v, environ) for k, v in node.items()}
    if isinstance(node, list):
        return [_expand_tree(v, environ) for v in node]
    if isinstance(node, str):
        return _interpolate_env(node, environ)
    return node


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        logger.debug('Config file not found: %s', path)
        return {}
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise UserError(
            f'Could not parse configuration file {path}: {exc}',
            cause=exc,
            remediation=f'Fix the YAML syntax in {path} or remove the file to use the defaults.',
        ) from exc
    if not isinstance(data, dict):
        logger.warning('%s does not contain a top-level mapping – ignored', path)
        return {}
    return data


class ConfigLoader:
    """
    Layers: built-in defaults, ``configs/default/global_app_config.yaml``,
    ``configs/<env>/global_app_config.yaml``, then caller overrides.
    Strings may use ``${VAR:-default}``.
    """

    def __init__(self, package_root: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> None:
        self._package_root: Path = package_root if package_root is not None else Path(__file__).resolve().parents[1]
        self._environ: Mapping[str, str] = environ if environ is not None else os.environ

    def load_global_config(self, env: Optional[str] = None,
                           overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        env = env or _ENV_DEFAULT
        logger.info('Loading global configuration for env=%s', env)
        cfg: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        cfg['env'] = env

        for label, path in self._config_layers(env):
            data = _load_yaml(path)
            if data:
                cfg = ConfigMerger.merge(cfg, data, label)
                logger.info('Merged %s: %s', label, path)
            elif env != _ENV_DEFAULT and label.startswith('ENV'):
                logger.warning('%s not found: %s', label, path)

        if overrides:
            cfg = ConfigMerger.merge(cfg, dict(overrides), 'CALLER_OVERRIDES')

        cfg = _expand_tree(cfg, self._environ)
        logger.info("✓ Global configuration loaded for env='%s'", env)
        logger.debug('Resolved global config keys: %s', list(cfg))
        return cfg

    def load_settings(self, env: Optional[str] = None,
                      overrides: Optional[Mapping[str, Any]] = None) -> KindlingSettings:
        cfg = self.load_global_config(env=env, overrides=overrides)
        try:
            return KindlingSettings.model_validate(cfg)
        except ValidationError as exc:
            raise UserError(
                f"Invalid configuration for env='{cfg.get('env')}': {exc.error_count()} error(s)",
                cause=exc,
                remediation='\n'.join(
                    f"  {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
                ),
            ) from exc

    def _config_layers(self, env: str):
        layers = [('DEFAULT_GLOBAL_APP_CONFIG', self._package_root / 'configs' / 'default' / _CONFIG_FILE)]
        if env != _ENV_DEFAULT:
            layers.append((f'ENV_GLOBAL_APP_CONFIG ({env})', self._package_root / 'configs' / env / _CONFIG_FILE))
        return layers
