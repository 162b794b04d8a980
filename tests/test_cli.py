"""Tests for the command-line entry point."""

import pytest
from conftest import GWEI, RECIPIENT, TEST_PRIVATE_KEY, FakeWeb3, make_receipt
from web3.exceptions import Web3RPCError

from pyfeemarket.cli import EXIT_FAILURE, EXIT_OK, EXIT_PENDING, format_address, format_gwei, main

ENV = {
    "RPC_URL": "http://localhost:8545",
    "PRIVATE_KEY": TEST_PRIVATE_KEY,
    "TO_ADDRESS": RECIPIENT,
}


def confirming(status=1, **kwargs):
    w3 = FakeWeb3(**kwargs)
    original_send = w3.eth.send_raw_transaction

    def send(raw):
        tx_hash = original_send(raw)
        w3.eth.receipts = [make_receipt(tx_hash, status=status, block_number=4242)]
        return tx_hash

    w3.eth.send_raw_transaction = send
    return w3


def run(argv, w3, environ=None, sleep=lambda seconds: None):
    return main(argv, environ=ENV if environ is None else environ, w3=w3, sleep=sleep)


def test_success(capsys):
    code = run(["--amount", "0.01"], confirming())
    out = capsys.readouterr().out

    assert code == EXIT_OK
    assert "To=0xbbbbbb…bbbb" in out
    assert "Amount=0.01 ETH" in out
    assert "maxFee=22 gwei priority=2 gwei" in out
    assert "submitted: 0x" in out
    assert "mined in block 4242 (status: success)" in out


def test_reverted_transfer_is_failure(capsys):
    code = run([], confirming(status=0))
    assert code == EXIT_FAILURE
    assert "(status: failed)" in capsys.readouterr().out


def test_rejection(capsys):
    error = Web3RPCError(
        "nonce too low",
        rpc_response={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "nonce too low"}},
    )
    w3 = FakeWeb3(send_error=error)
    code = run([], w3)

    assert code == EXIT_FAILURE
    assert "submission rejected: nonce too low" in capsys.readouterr().err
    assert w3.eth.count("get_transaction_receipt") == 0


def test_timeout_has_distinct_exit_status(capsys):
    w3 = FakeWeb3()
    code = run(["--max-polls", "2"], w3)

    assert code == EXIT_PENDING
    assert code != EXIT_FAILURE
    assert "check later" in capsys.readouterr().err
    assert w3.eth.count("get_transaction_receipt") == 2


def test_missing_configuration(capsys):
    w3 = FakeWeb3()
    code = run([], w3, environ={"RPC_URL": "http://localhost:8545"})

    assert code == EXIT_FAILURE
    assert "ConfigurationError" in capsys.readouterr().err
    assert w3.eth.calls == []


def test_invalid_recipient(capsys):
    w3 = FakeWeb3()
    code = run(["--to", "0x1234"], w3)

    assert code == EXIT_FAILURE
    assert "ValidationError" in capsys.readouterr().err
    assert w3.eth.calls == []


def test_conflicting_fee_flags(capsys):
    w3 = FakeWeb3()
    code = run(["--priority-gwei", "5", "--max-fee-gwei", "4"], w3)

    assert code == EXIT_FAILURE
    assert "exceeds max fee cap" in capsys.readouterr().err
    assert w3.eth.calls == []


def test_fee_flags(capsys):
    code = run(["--priority-gwei", "1", "--fee-multiplier", "3"], confirming(base_fee=10 * GWEI))
    assert code == EXIT_OK
    assert "maxFee=31 gwei priority=1 gwei" in capsys.readouterr().out


def test_chain_id_flags(capsys):
    w3 = confirming(chain_id=17000)
    assert run(["--chain-id", "auto"], w3) == EXIT_OK
    assert "chain=17000" in capsys.readouterr().out

    assert run(["--chain-id", "5"], confirming()) == EXIT_OK
    assert "chain=5" in capsys.readouterr().out


def test_bad_chain_id_flag(capsys):
    assert run(["--chain-id", "mainnet"], FakeWeb3()) == EXIT_FAILURE


@pytest.mark.parametrize(
    "wei, expected",
    [(0, "0"), (2 * GWEI, "2"), (20 * GWEI, "20"), (1_500_000_000, "1.5"), (1, "0.000000001")],
)
def test_format_gwei(wei, expected):
    assert format_gwei(wei) == expected


def test_format_address():
    assert format_address(bytes.fromhex("1234567890" * 4)) == "0x123456…7890"


def test_progress_lines_in_order(capsys, sender):
    run([], confirming())
    lines = capsys.readouterr().out.splitlines()

    assert lines[0].startswith(f"From={sender.address[:8].lower()}…")
    assert [line.split()[0] for line in lines[1:]] == ["type-2", "submitted:", "mined"]
