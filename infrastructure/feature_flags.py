# Host capabilities, probed once per process, plus the old boolean flag names.
import logging
import warnings
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Set

logger = logging.getLogger(__name__)


class Capability(Enum):
    DYNAMIC_MODULES = 'dynamic-modules'
    JSON = 'json'
    NATIVE_COMPILATION = 'native-compilation'


# Built-in host function whose presence signals each capability.
CAPABILITY_PROBES: Dict[Capability, str] = {
    Capability.DYNAMIC_MODULES: 'module_load',
    Capability.JSON: 'json_parse_string',
    Capability.NATIVE_COMPILATION: 'native_comp_available_p',
}

# Old boolean flag names kept for configs written against earlier releases.
DEPRECATED_FLAG_ALIASES: Dict[str, Capability] = {
    'MODULES': Capability.DYNAMIC_MODULES,
    'JSON': Capability.JSON,
    'NATIVECOMP': Capability.NATIVE_COMPILATION,
}


class CapabilitySet:
    """Immutable set of capabilities detected for this process."""

    __slots__ = ('_members',)

    def __init__(self, members: Iterable[Capability] = ()):
        object.__setattr__(self, '_members', frozenset(members))

    def __setattr__(self, name, value):
        raise AttributeError('CapabilitySet is immutable')

    def has(self, capability: Capability) -> bool:
        return capability in self._members

    def __contains__(self, capability: object) -> bool:
        return capability in self._members

    def __iter__(self) -> Iterator[Capability]:
        return iter(sorted(self._members, key=lambda c: c.value))

    def __len__(self) -> int:
        return len(self._members)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CapabilitySet):
            return NotImplemented
        return self._members == other._members

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        return f"CapabilitySet({[c.value for c in self]})"

    @property
    def members(self) -> FrozenSet[Capability]:
        return self._members

    def as_dict(self) -> Dict[str, bool]:
        return {c.value: c in self._members for c in Capability}


class FeatureDetector:
    """
    Probes the host once and caches the answer for the process lifetime.

    ``probe`` answers "does the host expose this built-in?". Native
    compilation additionally needs ``native_check`` to return true, since
    the function can exist on hosts built without a working compiler.
    """

    def __init__(
        self,
        probe: Callable[[str], bool],
        *,
        native_check: Optional[Callable[[], bool]] = None,
        probes: Optional[Mapping[Capability, str]] = None,
    ):
        self._probe = probe
        self._native_check = native_check
        self._probes: Dict[Capability, str] = dict(probes or CAPABILITY_PROBES)
        self._capabilities: Optional[CapabilitySet] = None

    def detect(self) -> CapabilitySet:
        if self._capabilities is not None:
            return self._capabilities

        found: Set[Capability] = set()
        for capability, builtin in self._probes.items():
            try:
                present = bool(self._probe(builtin))
            except Exception as e:
                logger.warning(f"Probe for '{builtin}' failed, treating {capability.value} as absent: {e}")
                present = False
            if present and capability is Capability.NATIVE_COMPILATION and self._native_check is not None:
                present = bool(self._native_check())
            if present:
                found.add(capability)

        self._capabilities = CapabilitySet(found)
        logger.info(f"Host capabilities detected: {[c.value for c in self._capabilities] or 'none'}")
        return self._capabilities

    @property
    def detected(self) -> bool:
        return self._capabilities is not None


class DeprecatedFlags:
    """
    Old flag names mapped onto capability lookups.

    Each name warns once per shim instance; reading a flag is never an error.
    """

    def __init__(self, capabilities: CapabilitySet, aliases: Optional[Mapping[str, Capability]] = None):
        self._capabilities = capabilities
        self._aliases: Dict[str, Capability] = dict(aliases or DEPRECATED_FLAG_ALIASES)
        self._warned: Set[str] = set()

    def get(self, flag_name: str) -> bool:
        try:
            capability = self._aliases[flag_name]
        except KeyError:
            raise KeyError(f"Unknown deprecated flag: '{flag_name}'") from None
        if flag_name not in self._warned:
            self._warned.add(flag_name)
            message = f"'{flag_name}' is deprecated; use capabilities.has(Capability.{capability.name}) instead"
            logger.warning(message)
            warnings.warn(message, DeprecationWarning, stacklevel=3)
        return self._capabilities.has(capability)

    def __getattr__(self, flag_name: str) -> bool:
        if flag_name.startswith('_'):
            raise AttributeError(flag_name)
        try:
            return self.get(flag_name)
        except KeyError as e:
            raise AttributeError(str(e)) from None

    def names(self) -> List[str]:
        return sorted(self._aliases)
