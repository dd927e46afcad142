"""
Storage credentials and connection-string construction.

Credentials come from the repository host (account name + access key, a SAS
token, or a full connection string) or, failing that, from the
``AZURE_STORAGE_*`` environment variables.
"""

import os
from dataclasses import dataclass

from .errors import AuthenticationError

CONNECTION_STRING_ENV = "AZURE_STORAGE_CONNECTION_STRING"
ACCOUNT_ENV = "AZURE_STORAGE_ACCOUNT"
KEY_ENV = "AZURE_STORAGE_KEY"
SAS_TOKEN_ENV = "AZURE_STORAGE_SAS_TOKEN"

ACCOUNT_KEY_TEMPLATE = (
    "DefaultEndpointsProtocol=https;AccountName={account};AccountKey={key};"
    "EndpointSuffix=core.windows.net"
)
SAS_TEMPLATE = (
    "BlobEndpoint=https://{account}.blob.core.windows.net;"
    "SharedAccessSignature={token}"
)


@dataclass
class AuthenticationInfo:
    """Credentials handed over by the repository host."""

    user_name: str | None = None
    password: str | None = None
    sas_token: str | None = None
    connection_string: str | None = None

    @classmethod
    def from_env(cls) -> "AuthenticationInfo":
        return cls(
            user_name=os.environ.get(ACCOUNT_ENV),
            password=os.environ.get(KEY_ENV),
            sas_token=os.environ.get(SAS_TOKEN_ENV),
            connection_string=os.environ.get(CONNECTION_STRING_ENV),
        )


class ConnectionStringFactory:
    def create(
        self,
        authentication_info: AuthenticationInfo | None,
        storage_account: str | None = None,
    ) -> str:
        """
        Build a storage connection string.

        Precedence: explicit connection string, SAS token, account name +
        key, then the AZURE_STORAGE_CONNECTION_STRING environment variable.
        The account name defaults to ``storage_account`` when the
        credentials carry no user name.
        """
        info = authentication_info or AuthenticationInfo()

        if info.connection_string:
            return info.connection_string

        account = info.user_name or storage_account
        if info.sas_token:
            if not account:
                raise AuthenticationError("A storage account is required for SAS access")
            return SAS_TEMPLATE.format(account=account, token=info.sas_token.lstrip("?"))

        if info.user_name and info.password:
            return ACCOUNT_KEY_TEMPLATE.format(account=info.user_name, key=info.password)

        env_connection_string = os.environ.get(CONNECTION_STRING_ENV)
        if env_connection_string:
            return env_connection_string

        raise AuthenticationError("Please provide storage account credentials")
