from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from credproc.core.credential_cache import CredentialCache
from credproc.core.federation_client import FederationClient
from credproc.exceptions.cache_exceptions import CacheWriteException
from credproc.models.credential_document import CredentialDocument


class CredentialProvider:
    def __init__(
        self,
        cache: CredentialCache,
        federation: FederationClient,
        role_arn: str,
        web_identity_token: str,
        session_name: str,
        duration_seconds: int,
        provider_id: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._cache = cache
        self._federation = federation
        self._role_arn = role_arn
        self._web_identity_token = web_identity_token
        self._session_name = session_name
        self._duration_seconds = duration_seconds
        self._provider_id = provider_id
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def get_credentials(self) -> CredentialDocument:
        cached = self._cache.load()

        should_refresh = False
        if cached is None or not cached.is_complete:
            should_refresh = True
        elif not self._cache.is_valid(cached, self._clock()):
            should_refresh = True

        if not should_refresh:
            logger.debug(f"Using cached credentials expiring at {cached.expiration}")
            return cached

        fresh = self._federation.fetch_credentials(
            self._role_arn,
            self._web_identity_token,
            self._session_name,
            self._duration_seconds,
            self._provider_id,
        )

        try:
            self._cache.store(fresh)
        except CacheWriteException as e:
            logger.warning(str(e))

        return fresh
