from __future__ import annotations
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional, Tuple

__all__ = ['HostInfo', 'parse_version']


def parse_version(version: str) -> Tuple[int, ...]:
    """'27.1' -> (27, 1). Raises ValueError on anything that is not dotted integers."""
    text = str(version).strip()
    if not text:
        raise ValueError('empty version string')
    parts = text.split('.')
    try:
        return tuple(int(part) for part in parts)
    except ValueError:
        raise ValueError(f"version '{version}' contains non-numeric parts") from None


@dataclass(frozen=True)
class HostInfo:
    version: str
    binary_path: Path = field(default_factory=lambda: Path(sys.executable))
    daemon: bool = False
    debug: bool = False
    builtins: FrozenSet[str] = frozenset()
    name: Optional[str] = None

    @property
    def version_info(self) -> Tuple[int, ...]:
        return parse_version(self.version)

    @property
    def major_minor(self) -> str:
        info = self.version_info
        minor = info[1] if len(info) > 1 else 0
        return f'{info[0]}.{minor}'

    def has_builtin(self, name: str) -> bool:
        return name in self.builtins
