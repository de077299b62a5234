import pytest
from pydantic import ValidationError

from collection_ledger import NftCollection
from collection_settings import Settings
from tests.conftest import OWNER


def test_defaults(monkeypatch):
    monkeypatch.delenv("MAX_SUPPLY", raising=False)
    s = Settings(_env_file=None)
    assert s.MAX_SUPPLY == 10000
    assert s.MAX_PER_TX == 20
    assert s.LOG_FORMAT == "console"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MAX_SUPPLY", "777")
    monkeypatch.setenv("UNIT_PRICE", "5")
    monkeypatch.setenv("BASE_URI", "ipfs://QmEnv/")

    s = Settings(_env_file=None)

    assert s.MAX_SUPPLY == 777
    assert s.UNIT_PRICE == 5
    assert s.BASE_URI == "ipfs://QmEnv/"


def test_rejects_invalid_limits(monkeypatch):
    monkeypatch.setenv("MAX_PER_TX", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_collection_from_settings():
    s = Settings(_env_file=None, MAX_SUPPLY=50, MAX_PER_TX=2, UNIT_PRICE=10, BASE_URI="ipfs://x/", COLLECTION_NAME="Demo")

    c = NftCollection.from_settings(OWNER, s)

    assert c.max_supply == 50
    assert c.max_per_tx == 2
    assert c.unit_price == 10
    assert c.base_uri == "ipfs://x/"
    assert c.name == "Demo"


def test_log_level_is_case_insensitive(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings(_env_file=None).LOG_LEVEL == "DEBUG"


def test_unknown_log_level_rejected(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "FOO")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_token_prefix_reaches_datum():
    s = Settings(_env_file=None, TOKEN_PREFIX="Cat")

    c = NftCollection.from_settings(OWNER, s)

    assert c.token_prefix == "Cat"
    assert c.as_datum(b"\x01" * 28, b"\x02" * 32, b"\x03" * 28).token_prefix == b"Cat"
