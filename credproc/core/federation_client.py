from typing import Any, Dict, Optional

import boto3
from botocore import UNSIGNED
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from credproc.exceptions.federation_exceptions import FederationException
from credproc.models.credential_document import CredentialDocument

CONNECT_TIMEOUT_SHARE = 0.4


class FederationClient:
    def __init__(self, region: str, timeout: int = 5):
        self.region = region
        self.timeout = timeout
        self._sts = None

    def _get_client(self):
        if self._sts is None:
            # connect and read share one timeout budget
            connect_timeout = self.timeout * CONNECT_TIMEOUT_SHARE
            try:
                # AssumeRoleWithWebIdentity is authorized by the token, not by a signature
                self._sts = boto3.client(
                    "sts",
                    region_name=self.region,
                    config=BotoConfig(
                        signature_version=UNSIGNED,
                        connect_timeout=connect_timeout,
                        read_timeout=self.timeout - connect_timeout,
                        retries={"total_max_attempts": 1},
                    ),
                )
            except (BotoCoreError, ValueError) as e:
                raise FederationException(str(e))

        return self._sts

    def fetch_credentials(
        self,
        role_arn: str,
        token: str,
        session_name: str,
        duration_seconds: int,
        provider_id: Optional[str] = None,
    ) -> CredentialDocument:
        """
        Exchange a web identity token for temporary credentials of a role.
        Args:
            role_arn (str): The role to assume.
            token (str): The web identity token, passed through verbatim.
            session_name (str): The role session name.
            duration_seconds (int): The requested credential lifetime.
            provider_id (str): The identity provider id, sent only when set.
        Returns:
            CredentialDocument: The credentials returned by STS.
        """
        request: Dict[str, Any] = {
            "RoleArn": role_arn,
            "RoleSessionName": session_name,
            "WebIdentityToken": token,
            "DurationSeconds": duration_seconds,
        }
        if provider_id is not None:
            request["ProviderId"] = provider_id

        sts = self._get_client()

        logger.debug(
            f"Assuming {role_arn} in {self.region} as {session_name} for {duration_seconds}s"
        )

        try:
            response = sts.assume_role_with_web_identity(**request)
        except (ClientError, BotoCoreError) as e:
            raise FederationException(str(e))

        return CredentialDocument.from_sts(response["Credentials"])
