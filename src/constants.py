"""Constants used in the project."""

import os
from dataclasses import dataclass
from enum import Enum

from errors import ConfigError


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONFIG_ERROR = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    PACKAGE_JSON_FILE = "package.json"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    MAX_PARALLEL_REQUESTS = 5
    DEFAULT_LIST_LENGTH = 20
    NPM_ACCEPT_HEADER = "application/json"

    # Age thresholds (seconds) used to color the "updated" column
    FRESH_AGE_SEC = 12 * 60 * 60
    RECENT_AGE_SEC = 5 * 24 * 60 * 60

    ENV_REGISTRY = "DEPFRESH_REGISTRY"
    ENV_MAX_PARALLEL = "DEPFRESH_MAX_PARALLEL"
    ENV_LOG_LEVEL = "DEPFRESH_LOG_LEVEL"
    ENV_LOG_FORMAT = "DEPFRESH_LOG_FORMAT"
    ENV_NO_COLOR = "NO_COLOR"


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    registry_url: str = Constants.REGISTRY_URL_NPM
    max_parallel: int = Constants.MAX_PARALLEL_REQUESTS
    request_timeout: int = Constants.REQUEST_TIMEOUT
    color: bool = True

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigError: If a variable holds an unusable value.
        """
        env = os.environ if environ is None else environ

        registry_url = env.get(Constants.ENV_REGISTRY) or Constants.REGISTRY_URL_NPM
        if not registry_url.startswith(("http://", "https://")):
            raise ConfigError(
                f"{Constants.ENV_REGISTRY} must be an http(s) URL, got {registry_url!r}"
            )
        if not registry_url.endswith("/"):
            registry_url += "/"

        raw_parallel = env.get(Constants.ENV_MAX_PARALLEL)
        max_parallel = Constants.MAX_PARALLEL_REQUESTS
        if raw_parallel:
            try:
                max_parallel = int(raw_parallel)
            except ValueError as exc:
                raise ConfigError(
                    f"{Constants.ENV_MAX_PARALLEL} must be an integer, got {raw_parallel!r}"
                ) from exc
            if max_parallel < 1:
                raise ConfigError(f"{Constants.ENV_MAX_PARALLEL} must be at least 1")

        return cls(
            registry_url=registry_url,
            max_parallel=max_parallel,
            color=Constants.ENV_NO_COLOR not in env,
        )
