"""Tests for configuration loading."""

import pytest
from conftest import GWEI, TEST_PRIVATE_KEY

from pyfeemarket import ConfigurationError, TransferConfig
from pyfeemarket.config import DEFAULT_AMOUNT_ETH, DEFAULT_CHAIN_ID

BASE_ENV = {
    "RPC_URL": "http://localhost:8545",
    "PRIVATE_KEY": TEST_PRIVATE_KEY,
    "TO_ADDRESS": "0x" + "b" * 40,
}


def load(**extra):
    return TransferConfig.from_env({**BASE_ENV, **extra})


def test_defaults():
    config = load()
    assert config.amount_eth == DEFAULT_AMOUNT_ETH == "0.001"
    assert config.chain_id == DEFAULT_CHAIN_ID == 11155111
    assert config.priority_fee_override is None
    assert config.fee_multiplier_override is None
    assert config.max_fee_override is None
    assert config.max_polls == 60
    assert config.poll_interval == 2.0
    config.validate()


def test_overrides_are_parsed():
    config = load(
        AMOUNT_ETH="0.01",
        CHAIN_ID="1",
        PRIORITY_GWEI="1.5",
        FEE_MULTIPLIER="3",
        MAX_FEE_GWEI="100",
        POLL_INTERVAL="0.5",
        MAX_POLLS="10",
        RPC_TIMEOUT="30",
    )
    assert config.amount_eth == "0.01"
    assert config.chain_id == 1
    assert config.priority_fee_override == 1_500_000_000
    assert config.fee_multiplier_override == 3
    assert config.max_fee_override == 100 * GWEI
    assert config.poll_interval == 0.5
    assert config.max_polls == 10
    assert config.request_timeout == 30.0


def test_chain_id_auto():
    assert load(CHAIN_ID="auto").chain_id is None
    assert load(CHAIN_ID="").chain_id == DEFAULT_CHAIN_ID


@pytest.mark.parametrize(
    "name, value",
    [
        ("FEE_MULTIPLIER", "two"),
        ("CHAIN_ID", "sepolia"),
        ("MAX_POLLS", "1.5"),
        ("POLL_INTERVAL", "soon"),
        ("PRIORITY_GWEI", "-1"),
        ("PRIORITY_GWEI", "0.0000000001"),
    ],
)
def test_malformed_values(name, value):
    with pytest.raises(ConfigurationError, match=name):
        load(**{name: value})


@pytest.mark.parametrize("missing", ["RPC_URL", "PRIVATE_KEY", "TO_ADDRESS"])
def test_missing_required(missing):
    env = {k: v for k, v in BASE_ENV.items() if k != missing}
    config = TransferConfig.from_env(env)
    with pytest.raises(ConfigurationError, match=missing.lower()):
        config.validate()


def test_conflicting_fee_overrides():
    config = load(PRIORITY_GWEI="5", MAX_FEE_GWEI="4")
    with pytest.raises(ConfigurationError, match="exceeds max fee cap"):
        config.validate()


def test_multiplier_below_one():
    with pytest.raises(ConfigurationError, match="multiplier"):
        load(FEE_MULTIPLIER="0").validate()


def test_repr_hides_private_key():
    config = load()
    assert TEST_PRIVATE_KEY not in repr(config)
    assert TEST_PRIVATE_KEY[2:] not in repr(config)


def test_with_overrides_skips_none():
    config = load().with_overrides(amount_eth="0.5", rpc_url=None)
    assert config.amount_eth == "0.5"
    assert config.rpc_url == BASE_ENV["RPC_URL"]


def test_reads_dotenv_file(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text(
        "RPC_URL=http://dotenv:8545\n"
        f"PRIVATE_KEY={TEST_PRIVATE_KEY}\n"
        "TO_ADDRESS=0x" + "c" * 40 + "\n"
        "FEE_MULTIPLIER=4\n"
    )
    for name in ("RPC_URL", "PRIVATE_KEY", "TO_ADDRESS", "FEE_MULTIPLIER", "CHAIN_ID"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)

    config = TransferConfig.from_env()

    assert config.rpc_url == "http://dotenv:8545"
    assert config.fee_multiplier_override == 4
