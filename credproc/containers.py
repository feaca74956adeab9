from dependency_injector import containers, providers

from credproc.config import Config
from credproc.core.credential_cache import CredentialCache
from credproc.core.credential_provider import CredentialProvider
from credproc.core.federation_client import FederationClient


class ApplicationContainer(containers.DeclarativeContainer):
    config = providers.Dependency(instance_of=Config)

    federation_client = providers.Singleton(
        FederationClient,
        region=config.provided.region,
        timeout=5,
    )

    credential_cache = providers.Singleton(
        CredentialCache,
        path=config.provided.cache_filepath,
        safety_margin=600,
    )

    credential_provider = providers.Singleton(
        CredentialProvider,
        cache=credential_cache,
        federation=federation_client,
        role_arn=config.provided.role_arn,
        web_identity_token=config.provided.web_identity_token,
        session_name=config.provided.session_name,
        duration_seconds=config.provided.duration_seconds,
        provider_id=config.provided.provider_id,
    )
