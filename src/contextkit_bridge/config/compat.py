import logging
import os

logger = logging.getLogger(__name__)

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})
_FALSY = frozenset({"0", "false", "no", "n", "off"})


def env_bool(name: str, *, default: bool) -> bool:
    """Read a boolean environment variable.

    Unset or empty values yield ``default``. Unrecognized values are logged and
    also fall back to ``default`` rather than guessing.
    """
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    logger.warning("Ignoring invalid boolean for %s: %r (using %s)", name, raw, default)
    return default


def env_optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid number for %s: %r", name, raw)
        return None
    if value <= 0:
        logger.warning("Ignoring non-positive value for %s: %r", name, raw)
        return None
    return value
