"""
Public bootstrap exception re-exports.

Import your exceptions like:
    from bootstrap.exceptions import CoreError, HookError, VersionError, ...
The actual definitions live in bootstrap.bootstrap_helper._exceptions.
"""
from bootstrap.bootstrap_helper._exceptions import *  # noqa: F401,F403
from bootstrap.bootstrap_helper._exceptions import __all__
