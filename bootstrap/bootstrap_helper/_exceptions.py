"""
Exception classes for the Kindling bootstrap system.

Two roots exist. ``CoreError`` covers everything the bootstrap sequence can
recover from at a hook point or phase boundary, plus the few subkinds that are
marked fatal. ``VersionError`` is a sibling root and is always fatal: it is
raised before any override touches the runtime.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence


class CoreError(RuntimeError):
    """
    Base exception for all recoverable (and a few fatal) bootstrap errors.

    Carries an optional cause, remediation text meant for a terminal user,
    and the phase that produced it.
    """

    default_fatal = False

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        remediation: Optional[str] = None,
        fatal: Optional[bool] = None,
        phase: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.remediation = remediation
        self.fatal = self.default_fatal if fatal is None else fatal
        self.phase = phase
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        base_msg = super().__str__()

        context_parts = []
        if self.phase:
            context_parts.append(f"phase={self.phase}")
        if context_parts:
            base_msg = f"{base_msg} ({', '.join(context_parts)})"
        if self.cause is not None:
            base_msg = f"{base_msg}\nCaused by: {type(self.cause).__name__}: {self.cause}"
        if self.remediation:
            base_msg = f"{base_msg}\n\n{self.remediation}"
        return base_msg


class HookError(CoreError):
    """
    Raised when one or more callbacks at a hook point failed.

    Isolated to that hook point unless the point is designated fatal.
    ``errors`` holds every exception raised at the point, first one first.
    """

    def __init__(
        self,
        message: str,
        hook: str,
        *,
        errors: Optional[Sequence[BaseException]] = None,
        cause: Optional[BaseException] = None,
        fatal: bool = False,
    ):
        errors = list(errors or [])
        if cause is None and errors:
            cause = errors[0]
        super().__init__(message, cause=cause, fatal=fatal, phase=hook)
        self.hook = hook
        self.errors: List[BaseException] = errors


class AutoloadError(CoreError):
    """
    Raised when the generated autoloads file is missing or corrupt.

    Never fatal: it routes the bootstrap to the regeneration collaborator.
    """

    def __init__(self, message: str, path: Optional[str] = None, *, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause, fatal=False)
        self.path = path

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.path:
            return f"{base_msg} (autoloads={self.path})"
        return base_msg


class UserError(CoreError):
    """Misconfiguration in the user's environment or config. Message must be actionable."""
    pass


class ModuleError(CoreError):
    """An external module failed during init or config. Isolated per module."""

    def __init__(self, message: str, module: Optional[str] = None, *, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.module = module

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.module:
            return f"[{self.module}] {base_msg}"
        return base_msg


class PackageError(CoreError):
    """Raised by the package-management collaborator."""

    def __init__(self, message: str, package: Optional[str] = None, *, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
        self.package = package


class ProfileError(CoreError):
    """
    Profile resolution found an inconsistent or missing profile.

    Fatal by default; callers that resolved a fallback profile raise it
    with ``fatal=False``.
    """

    default_fatal = True

    def __init__(
        self,
        message: str,
        profile: Optional[str] = None,
        *,
        remediation: Optional[str] = None,
        fatal: Optional[bool] = None,
    ):
        super().__init__(message, remediation=remediation, fatal=fatal, phase="path_resolution")
        self.profile = profile


class VersionErrorKind(Enum):
    TOO_OLD = 'TOO_OLD'
    MISMATCH = 'MISMATCH'
    MALFORMED = 'MALFORMED'


class VersionError(RuntimeError):
    """
    Host version incompatibility. Always fatal, always raised before any
    runtime override is applied.
    """

    fatal = True

    def __init__(
        self,
        message: str,
        kind: VersionErrorKind = VersionErrorKind.MALFORMED,
        *,
        current: Optional[str] = None,
        required: Optional[str] = None,
        remediation: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.current = current
        self.required = required
        self.remediation = remediation

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.remediation:
            return f"{base_msg}\n\n{self.remediation}"
        return base_msg


class VersionTooOldError(VersionError):
    def __init__(self, message: str, *, current: str, required: str, remediation: Optional[str] = None):
        super().__init__(message, VersionErrorKind.TOO_OLD, current=current, required=required, remediation=remediation)


class VersionMismatchError(VersionError):
    """Build-time and run-time host versions differ; cached artifacts must be regenerated."""

    def __init__(self, message: str, *, current: str, required: str, remediation: Optional[str] = None):
        super().__init__(message, VersionErrorKind.MISMATCH, current=current, required=required, remediation=remediation)


def is_fatal(error: BaseException) -> bool:
    """True for errors that must abort the whole bootstrap sequence."""
    if isinstance(error, VersionError):
        return True
    if isinstance(error, CoreError):
        return bool(error.fatal)
    return False


__all__ = [
    'CoreError', 'HookError', 'AutoloadError', 'UserError', 'ModuleError',
    'PackageError', 'ProfileError',
    'VersionError', 'VersionErrorKind', 'VersionTooOldError', 'VersionMismatchError',
    'is_fatal',
]
