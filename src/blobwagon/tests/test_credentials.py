import pytest

from blobwagon import AuthenticationError, AuthenticationInfo, ConnectionStringFactory


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "AZURE_STORAGE_CONNECTION_STRING",
        "AZURE_STORAGE_ACCOUNT",
        "AZURE_STORAGE_KEY",
        "AZURE_STORAGE_SAS_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)


def test_account_key_connection_string():
    factory = ConnectionStringFactory()
    info = AuthenticationInfo(user_name="acme", password="c2VjcmV0")
    assert factory.create(info) == (
        "DefaultEndpointsProtocol=https;AccountName=acme;AccountKey=c2VjcmV0;"
        "EndpointSuffix=core.windows.net"
    )


def test_explicit_connection_string_wins():
    info = AuthenticationInfo(
        user_name="acme", password="key", connection_string="UseDevelopmentStorage=true"
    )
    assert ConnectionStringFactory().create(info) == "UseDevelopmentStorage=true"


def test_sas_token_uses_repository_account():
    info = AuthenticationInfo(sas_token="?sv=2022-11-02&sig=abc")
    assert ConnectionStringFactory().create(info, storage_account="acme") == (
        "BlobEndpoint=https://acme.blob.core.windows.net;"
        "SharedAccessSignature=sv=2022-11-02&sig=abc"
    )


def test_sas_token_prefers_user_name():
    info = AuthenticationInfo(user_name="other", sas_token="sig=abc")
    result = ConnectionStringFactory().create(info, storage_account="acme")
    assert result.startswith("BlobEndpoint=https://other.blob.core.windows.net;")


def test_sas_token_without_account():
    with pytest.raises(AuthenticationError):
        ConnectionStringFactory().create(AuthenticationInfo(sas_token="sig=abc"))


def test_environment_fallback(monkeypatch):
    monkeypatch.setenv("AZURE_STORAGE_CONNECTION_STRING", "UseDevelopmentStorage=true")
    assert ConnectionStringFactory().create(None) == "UseDevelopmentStorage=true"
    # a user name alone is not enough to build a connection string
    info = AuthenticationInfo(user_name="acme")
    assert ConnectionStringFactory().create(info) == "UseDevelopmentStorage=true"


def test_missing_credentials():
    with pytest.raises(AuthenticationError):
        ConnectionStringFactory().create(None)
    with pytest.raises(AuthenticationError):
        ConnectionStringFactory().create(AuthenticationInfo(password="key"))


def test_authentication_info_from_env(monkeypatch):
    monkeypatch.setenv("AZURE_STORAGE_ACCOUNT", "acme")
    monkeypatch.setenv("AZURE_STORAGE_KEY", "key")
    info = AuthenticationInfo.from_env()
    assert info.user_name == "acme"
    assert info.password == "key"
    assert info.sas_token is None
    assert info.connection_string is None
