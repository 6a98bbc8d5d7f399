"""
Host version checks that run before anything else touches the runtime.

Both checks are fatal. Their messages are shown directly to a user at a
terminal, so each one says where the running host lives, where the install
docs are, and which command rebuilds cached artifacts.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from bootstrap.exceptions import VersionError, VersionErrorKind, VersionMismatchError, VersionTooOldError
from domain.host import parse_version

logger = logging.getLogger(__name__)


class VersionGuard:
    def __init__(
        self,
        *,
        app_name: str = 'kindling',
        binary_path: Optional[Union[str, Path]] = None,
        install_docs: str = 'docs/getting_started.md#install',
        sync_command: str = 'kindling sync',
        env_prefix: str = 'KINDLING',
    ):
        self.app_name = app_name
        self.binary_path = str(binary_path) if binary_path else 'unknown location'
        self.install_docs = install_docs
        self.sync_command = sync_command
        self.env_prefix = env_prefix

    def check(self, current_version: str, minimum_version: str) -> None:
        current = self._parse(current_version)
        minimum = self._parse(minimum_version)
        if self._major_minor(current) < self._major_minor(minimum):
            logger.critical(f'Host {current_version} is older than required {minimum_version}')
            raise VersionTooOldError(
                f'Detected host {current_version}, but {self.app_name} requires {minimum_version} or newer.',
                current=current_version,
                required=minimum_version,
                remediation=self._too_old_remediation(),
            )
        logger.debug(f'Host version {current_version} satisfies minimum {minimum_version}')

    def check_build_consistency(self, build_time_version: str, run_time_version: str) -> None:
        build = self._parse(build_time_version)
        run = self._parse(run_time_version)
        width = max(len(build), len(run))
        if self._pad(build, width) != self._pad(run, width):
            logger.critical(f'Host changed from {build_time_version} to {run_time_version} since last build')
            raise VersionMismatchError(
                f'Host version changed from {build_time_version} to {run_time_version} '
                f'since {self.app_name} was last built.',
                current=run_time_version,
                required=build_time_version,
                remediation=self._mismatch_remediation(),
            )

    def _too_old_remediation(self) -> str:
        return (
            f'The running host is at: {self.binary_path}\n'
            f'Install a newer host, see {self.install_docs}.\n'
            f'If a newer host is already installed, point {self.app_name} at it and rebuild:\n\n'
            f'  {self.env_prefix}_HOST=/path/to/host {self.sync_command}'
        )

    def _mismatch_remediation(self) -> str:
        return (
            f'The running host is at: {self.binary_path}\n'
            f'Compiled and cached artifacts must be regenerated. Run:\n\n'
            f'  {self.sync_command}\n\n'
            f'To rebuild against a different host binary:\n\n'
            f'  {self.env_prefix}_HOST=/path/to/host {self.sync_command}\n\n'
            f'Install docs: {self.install_docs}'
        )

    @staticmethod
    def _parse(version: str) -> Tuple[int, ...]:
        try:
            return parse_version(version)
        except ValueError as e:
            raise VersionError(f'Malformed host version: {e}', VersionErrorKind.MALFORMED, current=str(version)) from e

    @staticmethod
    def _major_minor(info: Tuple[int, ...]) -> Tuple[int, int]:
        return info[0], info[1] if len(info) > 1 else 0

    @staticmethod
    def _pad(info: Tuple[int, ...], width: int) -> Tuple[int, ...]:
        return info + (0,) * (width - len(info))
