"""
Directory derivation for user config, profiles, data and cache.

``PathResolver.resolve`` is a pure function of the environment mapping, a
directory-exists probe and fixed defaults. It reads, it never creates; the
caller decides when directories are made.

Precedence per entry (first defined wins):

    user_dir      <PREFIX>_CONFIG_DIR -> $XDG_CONFIG_HOME/<app>/ (if a dir) -> ~/.<app>.d/
    profile       <PREFIX>_PROFILE as name[@generation]; unset means legacy mode
    profiles_dir  <PREFIX>_PROFILES_DIR -> <install_root>/profiles/
    profile_dir   <profiles_dir>/<profile or default@latest>/
    local_dir     <PREFIX>_LOCAL_DIR -> profile_dir (profile active) -> <install_root>/.local/
    data/cache/state   profile_dir/{data,cache,state}/ or <local_dir>/{etc,cache,state}/
    env_file      <profile_dir or local_dir>/env
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from bootstrap.exceptions import ProfileError

__all__ = ['Profile', 'DirectorySet', 'PathResolver', 'DEFAULT_PROFILE', 'PROFILE_SEPARATOR']
logger = logging.getLogger(__name__)

PROFILE_SEPARATOR = '@'
DEFAULT_GENERATION = 'latest'


@dataclass(frozen=True)
class Profile:
    name: str
    generation: str = DEFAULT_GENERATION

    @classmethod
    def parse(cls, spec: str) -> 'Profile':
        text = spec.strip()
        name, sep, generation = text.partition(PROFILE_SEPARATOR)
        if sep and not generation:
            logger.warning(f"Profile '{spec}' has an empty generation, using '{DEFAULT_GENERATION}'")
        generation = generation or DEFAULT_GENERATION
        for part, label in ((name, 'name'), (generation, 'generation')):
            if not part:
                raise ProfileError(
                    f"Profile '{spec}' has an empty {label}",
                    profile=spec,
                    remediation='Set the profile as NAME or NAME@GENERATION, e.g. work@v2.',
                )
            if part in ('.', '..') or '/' in part or '\\' in part or os.sep in part:
                raise ProfileError(
                    f"Profile {label} '{part}' must not contain path separators or relative segments",
                    profile=spec,
                    remediation='Profile names are single directory names under the profiles directory.',
                )
        return cls(name=name, generation=generation)

    def __str__(self) -> str:
        return f'{self.name}{PROFILE_SEPARATOR}{self.generation}'


DEFAULT_PROFILE = Profile('default', DEFAULT_GENERATION)


@dataclass(frozen=True)
class DirectorySet:
    user_dir: str
    profiles_dir: str
    profile_dir: str
    local_dir: str
    data_dir: str
    cache_dir: str
    state_dir: str
    env_file: str
    autoloads_file: str
    profile: Optional[Profile] = None

    @property
    def profile_active(self) -> bool:
        return self.profile is not None

    def as_dict(self) -> dict:
        return {
            'user_dir': self.user_dir,
            'profile': str(self.profile) if self.profile else None,
            'profiles_dir': self.profiles_dir,
            'profile_dir': self.profile_dir,
            'local_dir': self.local_dir,
            'data_dir': self.data_dir,
            'cache_dir': self.cache_dir,
            'state_dir': self.state_dir,
            'env_file': self.env_file,
            'autoloads_file': self.autoloads_file,
        }


def _as_dir(path: str) -> str:
    path = os.path.normpath(os.path.abspath(os.path.expanduser(path)))
    return path if path.endswith(os.sep) else path + os.sep


def _as_file(path: str) -> str:
    return os.path.normpath(os.path.abspath(os.path.expanduser(path)))


class PathResolver:
    def __init__(
        self,
        install_root: str,
        *,
        app_name: str = 'kindling',
        env_prefix: str = 'KINDLING',
        host_version: str = '0.0',
        init_file_extension: str = 'yaml',
        isdir: Callable[[str], bool] = os.path.isdir,
        platform: str = sys.platform,
    ):
        self.install_root = _as_dir(install_root)
        self.app_name = app_name
        self.env_prefix = env_prefix
        self.host_version = host_version
        self.init_file_extension = init_file_extension.lstrip('.')
        self._isdir = isdir
        self._platform = platform

    def var(self, suffix: str) -> str:
        return f'{self.env_prefix}_{suffix}'

    def resolve(self, env: Mapping[str, str]) -> DirectorySet:
        profile = self.resolve_profile(env)
        profiles_dir = self._first(env, 'PROFILES_DIR') or os.path.join(self.install_root, 'profiles')
        profiles_dir = _as_dir(profiles_dir)
        # TODO: decide whether an unset profile should fall back to default@latest
        # instead of legacy mode once the default profile layout is finalized.
        profile_dir = _as_dir(os.path.join(profiles_dir, str(profile or DEFAULT_PROFILE)))

        local_override = self._first(env, 'LOCAL_DIR')
        if local_override:
            local_dir = _as_dir(local_override)
        elif profile is not None:
            local_dir = profile_dir
        else:
            local_dir = _as_dir(os.path.join(self.install_root, '.local'))

        if profile is not None:
            data_dir = _as_dir(os.path.join(profile_dir, 'data'))
            cache_dir = _as_dir(os.path.join(profile_dir, 'cache'))
            state_dir = _as_dir(os.path.join(profile_dir, 'state'))
            base_dir = profile_dir
            autoloads_name = f'init.{self._version_tag()}.{self.init_file_extension}'
        else:
            data_dir = _as_dir(os.path.join(local_dir, 'etc'))
            cache_dir = _as_dir(os.path.join(local_dir, 'cache'))
            state_dir = _as_dir(os.path.join(local_dir, 'state'))
            base_dir = local_dir
            autoloads_name = f'autoloads.{self._version_tag()}.{self.init_file_extension}'

        directories = DirectorySet(
            user_dir=self.resolve_user_dir(env),
            profiles_dir=profiles_dir,
            profile_dir=profile_dir,
            local_dir=local_dir,
            data_dir=data_dir,
            cache_dir=cache_dir,
            state_dir=state_dir,
            env_file=_as_file(os.path.join(base_dir, 'env')),
            autoloads_file=_as_file(os.path.join(base_dir, autoloads_name)),
            profile=profile,
        )
        logger.debug(f'Resolved directories: {directories.as_dict()}')
        return directories

    def resolve_profile(self, env: Mapping[str, str]) -> Optional[Profile]:
        spec = self._first(env, 'PROFILE')
        if not spec:
            return None
        return Profile.parse(spec)

    def resolve_user_dir(self, env: Mapping[str, str]) -> str:
        explicit = self._first(env, 'CONFIG_DIR')
        if explicit:
            return _as_dir(explicit)
        home = self._home(env)
        xdg_home = env.get('XDG_CONFIG_HOME') or os.path.join(home, '.config')
        xdg_dir = os.path.join(xdg_home, self.app_name)
        if self._isdir(xdg_dir):
            return _as_dir(xdg_dir)
        return _as_dir(os.path.join(home, f'.{self.app_name}.d'))

    def _first(self, env: Mapping[str, str], suffix: str) -> Optional[str]:
        value = env.get(self.var(suffix))
        return value if value else None

    def _home(self, env: Mapping[str, str]) -> str:
        if self._platform.startswith('win'):
            home = env.get('USERPROFILE') or env.get('HOME')
        else:
            home = env.get('HOME')
        return home or os.path.expanduser('~')

    def _version_tag(self) -> str:
        parts = str(self.host_version).split('.')
        return '.'.join((parts + ['0'])[:2])
