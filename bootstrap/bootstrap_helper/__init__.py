"""Internal helpers for the bootstrap package. Exceptions live here to avoid circular imports."""
from ._exceptions import *  # noqa: F401,F403
from ._exceptions import __all__
