import argparse
import sys
from typing import Optional

from dependency_injector import providers
from loguru import logger

from credproc.config import Config, DEFAULT_LOG_LEVEL
from credproc.containers import ApplicationContainer
from credproc.exceptions.cache_exceptions import CacheWriteException
from credproc.exceptions.config_exceptions import ConfigException
from credproc.exceptions.federation_exceptions import FederationException
from credproc.utils.log_setup import configure_logging


def main(config_path: Optional[str] = None) -> int:
    configure_logging(DEFAULT_LOG_LEVEL)

    try:
        config: Config = Config(config_path, on_log_level=configure_logging)
    except ConfigException as e:
        logger.critical(f"Configuration error: {e}")
        return 1

    logger.debug("Starting webIdentityCredentialProcess")

    container = ApplicationContainer(config=providers.Object(config))

    try:
        credentials = container.credential_provider().get_credentials()
    except FederationException as e:
        logger.critical(f"Could not get credentials: {e}")
        return 1

    try:
        container.credential_cache().store(credentials)
    except CacheWriteException as e:
        logger.warning(str(e))

    print(credentials.to_json())
    logger.debug("Stopping webIdentityCredentialProcess")
    return 0


def run():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "config",
        help="An optional .env file layered under the process environment",
        type=str,
        default=None,
        nargs="?",
    )
    args = parser.parse_args()

    env_file: Optional[str] = args.config

    sys.exit(main(env_file))


if __name__ == "__main__":
    run()
