import os.path
import re
from pathlib import Path
from typing import Callable, Mapping, Optional

from dotenv import dotenv_values
from loguru import logger

from credproc.enums.log_level import LogLevel
from credproc.exceptions.config_exceptions import ConfigValueException, ConfigTypeException

AWS_DEFAULT_REGION = "AWS_DEFAULT_REGION"
AWS_ROLE_ARN = "AWS_ROLE_ARN"
AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_CACHE_FILE = (
    "AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_CACHE_FILE"
)
AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_LOG_LEVEL = (
    "AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_LOG_LEVEL"
)
AWS_WEB_IDENTITY_DURATION = "AWS_WEB_IDENTITY_DURATION"
AWS_WEB_IDENTITY_PROVIDER_ID = "AWS_WEB_IDENTITY_PROVIDER_ID"
AWS_WEB_IDENTITY_SESSION_NAME = "AWS_WEB_IDENTITY_SESSION_NAME"
AWS_WEB_IDENTITY_TOKEN_FILE = "AWS_WEB_IDENTITY_TOKEN_FILE"

DEFAULT_SESSION_NAME = "webIdentityCredentialProcess"
DEFAULT_DURATION_SECONDS = 3600
DEFAULT_LOG_LEVEL = LogLevel.WARNING
CACHE_FILENAME = ".webIdentityCredentialProcess.json"

_MAX_INT32 = 2**31 - 1
_INTEGER = re.compile(r"\+?[0-9]{1,10}")


class Config:
    def __init__(
        self,
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        on_log_level: Optional[Callable[[LogLevel], None]] = None,
    ):
        raw: dict[str, str | None] = {}
        if config_file:
            raw.update(dotenv_values(config_file))
        raw.update(os.environ if environ is None else environ)

        self.log_level: LogLevel = self._optional_log_level(
            raw, AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_LOG_LEVEL
        )
        # the log level takes effect before the remaining settings are resolved
        if on_log_level is not None:
            on_log_level(self.log_level)

        self.role_arn: str = self._require(raw, AWS_ROLE_ARN)
        self.region: str = self._require(raw, AWS_DEFAULT_REGION)
        self.token_filepath: str = self._require_path(raw, AWS_WEB_IDENTITY_TOKEN_FILE)
        self.web_identity_token: str = self._read_token(
            self.token_filepath, AWS_WEB_IDENTITY_TOKEN_FILE
        )
        self.session_name: str = raw.get(AWS_WEB_IDENTITY_SESSION_NAME) or DEFAULT_SESSION_NAME
        self.duration_seconds: int = self._optional_duration(raw, AWS_WEB_IDENTITY_DURATION)
        self.provider_id: Optional[str] = raw.get(AWS_WEB_IDENTITY_PROVIDER_ID)
        self.cache_filepath: str = self._cache_path(
            raw, AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_CACHE_FILE
        )

    def _require(self, config: Mapping[str, str | None], key: str) -> str:
        value = config.get(key)
        if value is None:
            raise ConfigValueException(f"{key} is a mandatory OS environment variable.")
        return value

    def _require_path(self, config: Mapping[str, str | None], key: str) -> str:
        value = self._require(config, key)

        if os.path.exists(value) and os.path.isfile(value):
            return value
        else:
            raise ConfigTypeException(f"{key} must point to an existing file.")

    def _read_token(self, path: str, key: str) -> str:
        try:
            with open(path, "rb") as token_file:
                return token_file.read().decode("utf-8")
        except (OSError, UnicodeDecodeError):
            raise ConfigTypeException(f"{key} must point to a readable file.")

    def _optional_duration(self, config: Mapping[str, str | None], key: str) -> int:
        value = config.get(key)
        if value is None:
            return DEFAULT_DURATION_SECONDS

        if _INTEGER.fullmatch(value) and 0 < int(value) <= _MAX_INT32:
            return int(value)

        logger.warning(f"Invalid value for {key} {value}")
        logger.info(f"Falling back to default duration {DEFAULT_DURATION_SECONDS}")
        return DEFAULT_DURATION_SECONDS

    def _optional_log_level(self, config: Mapping[str, str | None], key: str) -> LogLevel:
        value = config.get(key)
        if value is None:
            return DEFAULT_LOG_LEVEL

        level = LogLevel.parse(value)
        if level is None:
            logger.warning(f"Invalid value '{value}' for '{key}'")
            return DEFAULT_LOG_LEVEL
        return level

    def _cache_path(self, config: Mapping[str, str | None], key: str) -> str:
        value = config.get(key)
        if value is not None:
            return value

        try:
            home = Path.home()
        except (RuntimeError, KeyError) as e:
            raise ConfigValueException(f"Could not get home dir {e} and {key} not provided.")
        return str(home / ".aws" / CACHE_FILENAME)
