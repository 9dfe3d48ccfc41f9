import datetime

import pytest
from jose import JWTError, jwt

from catalog.auth import issue_service_token
from catalog.exceptions import CatalogConfigError


def test_token_carries_role_issuer_audience_and_expiry():
    token = issue_service_token(
        "User",
        datetime.timedelta(minutes=60),
        secret_key="s3cret",
        issuer="stocksync-suppliers",
        audience="stocksync-items",
    )

    claims = jwt.decode(
        token,
        "s3cret",
        algorithms=["HS256"],
        audience="stocksync-items",
        issuer="stocksync-suppliers",
    )
    assert claims["role"] == "User"
    assert claims["exp"] - claims["iat"] == 3600


def test_token_is_signed_with_the_configured_key():
    token = issue_service_token(secret_key="right", issuer="", audience="")

    with pytest.raises(JWTError):
        jwt.decode(token, "wrong", algorithms=["HS256"])


def test_token_is_deterministic_for_fixed_time():
    now = datetime.datetime(2030, 1, 1, tzinfo=datetime.timezone.utc)
    kwargs = dict(secret_key="k", issuer="i", audience="a", now=now)

    assert issue_service_token(**kwargs) == issue_service_token(**kwargs)


def test_missing_secret_key_is_a_config_error():
    with pytest.raises(CatalogConfigError):
        issue_service_token(secret_key="")
