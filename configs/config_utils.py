import copy
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


def _short(value: Any, limit: int = 80) -> str:
    text = str(value)
    return text if len(text) <= limit else text[:limit] + '...'


class ConfigMerger:
    @staticmethod
    def merge(
        base: Dict[str, Any],
        override: Dict[str, Any],
        context_description: str = "ConfigMerge",
        strict_keys: bool = False,
    ) -> Dict[str, Any]:
        """
        Merges an 'override' dictionary into a 'base' dictionary.
        - Dictionaries are merged recursively.
        - Lists and scalars in override replace values in base.
        - If strict_keys is True, override keys not in base raise ValueError.
        Neither input is mutated.
        """
        if not isinstance(override, dict):
            logger.warning(
                f"[{context_description}] Override for merge is not a dictionary (type: {type(override)}). "
                f"Returning base."
            )
            return copy.deepcopy(base)

        merged = copy.deepcopy(base)
        for key, override_value in override.items():
            if key not in merged:
                if strict_keys:
                    raise ValueError(f"[{context_description}] Strict mode: unknown key '{key}' in override.")
                merged[key] = copy.deepcopy(override_value)
                logger.debug(f"[{context_description}] Added key '{key}': {_short(override_value)}")
            elif isinstance(merged[key], dict) and isinstance(override_value, dict):
                merged[key] = ConfigMerger.merge(
                    merged[key],
                    override_value,
                    context_description=f"{context_description} -> {key}",
                    strict_keys=strict_keys,
                )
            elif merged[key] != override_value:
                logger.debug(
                    f"[{context_description}] Overridden key '{key}'. "
                    f"Old: {_short(merged[key])}, New: {_short(override_value)}"
                )
                merged[key] = copy.deepcopy(override_value)
        return merged
