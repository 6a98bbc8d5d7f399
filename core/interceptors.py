from __future__ import annotations
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

__all__ = ['Interceptor', 'InterceptorChain', 'ignore']
logger = logging.getLogger(__name__)

# An "around" interceptor receives the next callable in the chain first.
AroundFn = Callable[..., Any]


def ignore(*args: Any, **kwargs: Any) -> None:
    return None


@dataclass(eq=False)
class Interceptor:
    label: str
    around: AroundFn
    depth: int = 0
    on_uninstall: Optional[Callable[[], None]] = None
    sequence: int = 0
    _chain: Optional['InterceptorChain'] = field(default=None, repr=False)

    @property
    def installed(self) -> bool:
        return self._chain is not None

    def uninstall(self) -> bool:
        if self._chain is None:
            return False
        return self._chain.uninstall(self)


class InterceptorChain:
    """
    Ordered wrappers around one host function.

    Lower depth runs outermost; equal depths keep installation order. Each
    interceptor may carry its own restoration closure, run when it is
    uninstalled.
    """

    _sequence = itertools.count()

    def __init__(self, name: str, target: Callable[..., Any]):
        self.name = name
        self.target = target
        self._interceptors: List[Interceptor] = []

    def install(self, around: AroundFn, *, label: Optional[str] = None, depth: int = 0,
                on_uninstall: Optional[Callable[[], None]] = None) -> Interceptor:
        interceptor = Interceptor(
            label=label or getattr(around, '__name__', repr(around)),
            around=around,
            depth=depth,
            on_uninstall=on_uninstall,
            sequence=next(self._sequence),
        )
        interceptor._chain = self
        self._interceptors.append(interceptor)
        self._interceptors.sort(key=lambda i: (i.depth, i.sequence))
        logger.debug(f"Installed interceptor '{interceptor.label}' on {self.name} (depth={depth})")
        return interceptor

    def install_override(self, replacement: Callable[..., Any], *, label: Optional[str] = None,
                         depth: int = 0, on_uninstall: Optional[Callable[[], None]] = None) -> Interceptor:
        """Install an interceptor that never calls through to the wrapped function."""
        def _override(_next, *args, **kwargs):
            return replacement(*args, **kwargs)
        return self.install(_override, label=label or f'override:{getattr(replacement, "__name__", "fn")}',
                            depth=depth, on_uninstall=on_uninstall)

    def uninstall(self, interceptor: Interceptor) -> bool:
        if interceptor not in self._interceptors:
            return False
        self._interceptors.remove(interceptor)
        interceptor._chain = None
        logger.debug(f"Uninstalled interceptor '{interceptor.label}' from {self.name}")
        if interceptor.on_uninstall is not None:
            interceptor.on_uninstall()
        return True

    @property
    def interceptors(self) -> List[Interceptor]:
        return list(self._interceptors)

    def __len__(self) -> int:
        return len(self._interceptors)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        # Snapshot so an interceptor uninstalling itself mid-call is safe.
        chain = list(self._interceptors)

        def _invoke(index: int, *a: Any, **kw: Any) -> Any:
            if index == len(chain):
                return self.target(*a, **kw)
            return chain[index].around(lambda *na, **nkw: _invoke(index + 1, *na, **nkw), *a, **kw)

        return _invoke(0, *args, **kwargs)
