import logging
import os
import shlex
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 2 * 1024 * 1024
PANDOC_TIMEOUT_SEC = 60.0
DEFAULT_PORT = 3030
DEFAULT_COMMAND = ("pandoc",)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("ignoring %s=%r: not a valid %s, using %s", name, raw, cast.__name__, default)
        return default
    if value <= 0:
        logger.warning("ignoring %s=%r: must be positive, using %s", name, raw, default)
        return default
    return value


def _env_command(name: str) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return DEFAULT_COMMAND
    try:
        command = tuple(shlex.split(raw))
    except ValueError as e:
        logger.warning("ignoring %s=%r: %s", name, raw, e)
        return DEFAULT_COMMAND
    if not command:
        logger.warning("ignoring empty %s, using %s", name, DEFAULT_COMMAND[0])
        return DEFAULT_COMMAND
    return command


@dataclass(frozen=True)
class Settings:
    """Server configuration.

    Limits are plain constructor arguments so tests can build an app with,
    for example, a 10 byte body cap or a sub-second timeout.
    """

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    max_body_bytes: int = MAX_BODY_BYTES
    timeout_sec: float = PANDOC_TIMEOUT_SEC
    pandoc_command: tuple[str, ...] = DEFAULT_COMMAND
    log_level: str = "INFO"
    reload: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment.

        Malformed values are logged and replaced by their defaults, so importing
        the app never fails on a bad variable.
        """
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_number("PORT", DEFAULT_PORT, int),
            max_body_bytes=_env_number("MAX_BODY_BYTES", MAX_BODY_BYTES, int),
            timeout_sec=_env_number("PANDOC_TIMEOUT_SEC", PANDOC_TIMEOUT_SEC, float),
            pandoc_command=_env_command("PANDOC_COMMAND"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            reload=_env_flag("RELOAD"),
        )
