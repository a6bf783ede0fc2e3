"""Runtime settings read from environment variables (.env aware at entry points)."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_SIDEREAL_URL = "https://aa.usno.navy.mil/api/siderealtime"
DEFAULT_TIMEOUT = 5.0

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Knobs for the sidereal-time lookup and logging."""

    sidereal_url: str = DEFAULT_SIDEREAL_URL
    timeout: float = DEFAULT_TIMEOUT  # Seconds; a timeout counts as a failed lookup
    remote_lookup: bool = True  # False = always use the closed-form fallback
    log_level: str = "WARNING"


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment.

    Recognised variables: ``SKYPOSITION_SIDEREAL_URL``, ``SKYPOSITION_TIMEOUT``,
    ``SKYPOSITION_REMOTE_LOOKUP`` and ``SKYPOSITION_LOG_LEVEL``.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        Settings with defaults for anything unset.

    Raises:
        ValueError: On a malformed timeout or flag.
    """
    env = os.environ if environ is None else environ

    timeout = DEFAULT_TIMEOUT
    raw_timeout = env.get("SKYPOSITION_TIMEOUT")
    if raw_timeout:
        timeout = float(raw_timeout)
        if timeout <= 0:
            raise ValueError(
                f"SKYPOSITION_TIMEOUT must be positive, got {raw_timeout!r}"
            )

    remote_lookup = True
    raw_remote = env.get("SKYPOSITION_REMOTE_LOOKUP")
    if raw_remote:
        remote_lookup = _parse_bool("SKYPOSITION_REMOTE_LOOKUP", raw_remote)

    return Settings(
        sidereal_url=env.get("SKYPOSITION_SIDEREAL_URL") or DEFAULT_SIDEREAL_URL,
        timeout=timeout,
        remote_lookup=remote_lookup,
        log_level=(env.get("SKYPOSITION_LOG_LEVEL") or "WARNING").upper(),
    )
