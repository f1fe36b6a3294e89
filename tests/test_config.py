import pytest

from config.config import (
    ConfigError,
    NameSecretPair,
    PaymentSettings,
    RawBearerToken,
    Settings,
    parse_facilitator_credential,
)
from config.pricing import RoutePrice

ENV_VARS = [
    "PORT",
    "HOST",
    "BRAVE_API_KEY",
    "UPSTREAM_TIMEOUT_S",
    "PAYMENT_ENABLED",
    "PAYMENT_ADDRESS",
    "PAYMENT_NETWORK",
    "PAYMENT_ASSET",
    "FACILITATOR_URL",
    "FACILITATOR_API_KEY",
    "FACILITATOR_KEY_NAME",
    "FACILITATOR_KEY_SECRET",
    "PRICE_SEARCH",
    "PRICE_FETCH",
    "PRICE_ANALYZE_GITHUB",
]


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Point at a missing file so a developer's .env never leaks into tests
    return tmp_path / "missing.env"


def test_defaults_are_free_mode(clean_env):
    settings = Settings.from_env(env_file=clean_env)
    assert settings.mode == "free"
    assert settings.port == 3000
    assert settings.brave_api_key == ""
    assert settings.upstream_timeout_s is None
    assert settings.payment.facilitator_url == "https://x402.org/facilitator"
    assert settings.price_for("/api/search").price == "$0.001"


def test_paid_mode_from_env(clean_env, monkeypatch):
    monkeypatch.setenv("PAYMENT_ENABLED", "true")
    monkeypatch.setenv("PAYMENT_ADDRESS", "0xabc")
    monkeypatch.setenv("PAYMENT_NETWORK", "eip155:8453")
    monkeypatch.setenv("FACILITATOR_URL", "https://api.cdp.coinbase.com/platform/v2/x402/")
    monkeypatch.setenv("FACILITATOR_API_KEY", "bearer-token")
    monkeypatch.setenv("PRICE_FETCH", "$0.01")
    monkeypatch.setenv("PORT", "8080")

    settings = Settings.from_env(env_file=clean_env)

    assert settings.mode == "paid"
    assert settings.port == 8080
    assert settings.payment.network == "eip155:8453"
    assert settings.payment.facilitator_url == "https://api.cdp.coinbase.com/platform/v2/x402"
    assert settings.payment.credential == RawBearerToken("bearer-token")
    assert settings.price_for("/api/fetch").atomic_amount() == "10000"


def test_paid_mode_requires_payout_address(clean_env, monkeypatch):
    monkeypatch.setenv("PAYMENT_ENABLED", "true")
    with pytest.raises(ConfigError, match="PAYMENT_ADDRESS"):
        Settings.from_env(env_file=clean_env)


def test_unknown_network_requires_asset_override():
    settings = Settings(payment=PaymentSettings(enabled=True, pay_to="0xabc", network="solana"))
    with pytest.raises(ConfigError, match="Unknown payment network"):
        settings.validate()

    settings = Settings(
        payment=PaymentSettings(enabled=True, pay_to="0xabc", network="solana", asset="0xusdc")
    )
    settings.validate()


def test_bad_price_is_config_error(clean_env, monkeypatch):
    monkeypatch.setenv("PRICE_SEARCH", "cheap")
    with pytest.raises(ConfigError, match="Invalid price"):
        Settings.from_env(env_file=clean_env)


def test_bad_port_is_config_error(clean_env, monkeypatch):
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ConfigError):
        Settings.from_env(env_file=clean_env)


@pytest.mark.parametrize(
    "price, atomic",
    [("$0.001", "1000"), ("0.005", "5000"), ("$1", "1000000"), ("$ 0.25", "250000")],
)
def test_price_to_atomic_units(price, atomic):
    assert RoutePrice(path="/x", price=price, description="x").atomic_amount() == atomic


@pytest.mark.parametrize(
    "raw, name, secret, expected",
    [
        (None, None, None, None),
        ("", None, None, None),
        ("eyJhbGciOi.abc.def", None, None, RawBearerToken("eyJhbGciOi.abc.def")),
        ("key-name:key-secret", None, None, NameSecretPair("key-name", "key-secret")),
        (
            '{"name": "organizations/1/apiKeys/2", "privateKey": "line1\\\\nline2"}',
            None,
            None,
            NameSecretPair("organizations/1/apiKeys/2", "line1\nline2"),
        ),
        ("ignored", "n", "s", NameSecretPair("n", "s")),
    ],
)
def test_parse_facilitator_credential(raw, name, secret, expected):
    assert parse_facilitator_credential(raw, name=name, secret=secret) == expected


def test_parse_facilitator_credential_bad_json():
    with pytest.raises(ConfigError):
        parse_facilitator_credential('{"name": "only-name"}')
