"""Shared fixtures: an in-memory stand-in for web3's ``w3`` object."""

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
from eth_account import Account
from eth_utils import keccak
from web3.exceptions import TransactionNotFound

# Test private key for signing
TEST_PRIVATE_KEY = "0x7eafbf9699b30c9ed8e3d6bbae57dd4f047544fde34d4c982dd591c2bee39ad0"

RECIPIENT = "0x" + "b" * 40
SEPOLIA = 11155111
GWEI = 10**9

PENDING = object()


class FakeEth:
    """Scripted replacement for ``w3.eth`` that records every call."""

    def __init__(
        self,
        base_fee=10 * GWEI,
        tx_count=5,
        chain_id=SEPOLIA,
        send_error=None,
        receipts=(),
    ):
        self.base_fee = base_fee
        self.tx_count = tx_count
        self._chain_id = chain_id
        self.send_error = send_error
        self.receipts = list(receipts)
        self.calls = []
        self.sent = []

    def get_block(self, block_identifier):
        self.calls.append(("get_block", block_identifier))
        if isinstance(self.base_fee, Exception):
            raise self.base_fee
        block = {"number": 100, "hash": b"\x01" * 32}
        if self.base_fee is not None:
            block["baseFeePerGas"] = self.base_fee
        return block

    def get_transaction_count(self, address, block_identifier="latest"):
        self.calls.append(("get_transaction_count", address, block_identifier))
        if isinstance(self.tx_count, Exception):
            raise self.tx_count
        return self.tx_count

    @property
    def chain_id(self):
        self.calls.append(("chain_id",))
        if isinstance(self._chain_id, Exception):
            raise self._chain_id
        return self._chain_id

    def send_raw_transaction(self, raw):
        self.calls.append(("send_raw_transaction", raw))
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(bytes(raw))
        return keccak(bytes(raw))

    def get_transaction_receipt(self, tx_hash):
        self.calls.append(("get_transaction_receipt", tx_hash))
        result = self.receipts.pop(0) if self.receipts else PENDING
        if result is PENDING:
            raise TransactionNotFound(f"Transaction with hash: '{tx_hash.hex()}' not found.")
        if isinstance(result, Exception):
            raise result
        return result

    def count(self, name):
        return sum(1 for call in self.calls if call[0] == name)


class FakeWeb3:
    def __init__(self, **kwargs):
        self.eth = FakeEth(**kwargs)


class RecordingSleep:
    """Injected sleep that only records the requested delays."""

    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


def make_receipt(tx_hash: bytes, status: int = 1, block_number: int = 123) -> dict:
    return {
        "transactionHash": tx_hash,
        "blockNumber": block_number,
        "blockHash": b"\x22" * 32,
        "status": status,
        "gasUsed": 21000,
        "effectiveGasPrice": 12 * GWEI,
    }


@pytest.fixture
def sender():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def sleep():
    return RecordingSleep()


class FailingNode:
    """Local HTTP endpoint that answers every JSON-RPC POST with 503."""

    def __init__(self):
        self.methods = []
        node = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self):
                body = self.rfile.read(int(self.headers.get("Content-Length", 0)))
                node.methods.append(json.loads(body)["method"])
                self.send_response(503)
                self.send_header("Content-Length", "0")
                self.end_headers()

            def log_message(self, format, *args):
                pass

        self.server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self.url = f"http://127.0.0.1:{self.server.server_address[1]}"
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, *exc_info):
        self.server.shutdown()
        self.server.server_close()


@pytest.fixture
def failing_node():
    with FailingNode() as node:
        yield node
