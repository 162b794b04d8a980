"""Read-only queries for the chain state a transfer is built from."""

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from web3 import Web3
from web3.exceptions import Web3Exception

from .errors import ConfigurationError, NetworkError

logger = logging.getLogger(__name__)

# Transport-level failures that all surface as NetworkError.
RPC_ERRORS = (requests.exceptions.RequestException, Web3Exception, OSError)


@dataclass(frozen=True)
class ChainState:
    """Inputs to fee estimation and assembly, read at one point in time."""

    base_fee_per_gas: int
    nonce: int
    chain_id: int


def connect(rpc_url: str, request_timeout: float = 10.0) -> Web3:
    """Create an HTTP-backed Web3 client that sends every request exactly once."""
    provider = Web3.HTTPProvider(
        rpc_url,
        request_kwargs={"timeout": request_timeout},
        exception_retry_configuration=None,
    )
    return Web3(provider)


def _as_int(value, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise NetworkError(f"malformed RPC response: {what} is {value!r}")
    return value


class ChainStateReader:
    """Queries base fee, nonce and chain id through a web3 client."""

    def __init__(self, w3: Web3):
        self.w3 = w3

    def base_fee_per_gas(self) -> int:
        try:
            block = self.w3.eth.get_block("latest")
        except RPC_ERRORS as exc:
            raise NetworkError(f"failed to fetch latest block: {exc}") from exc
        try:
            base_fee = block["baseFeePerGas"]
        except (KeyError, TypeError) as exc:
            raise NetworkError("latest block has no baseFeePerGas; chain does not support EIP-1559") from exc
        return _as_int(base_fee, "baseFeePerGas")

    def nonce(self, sender: str) -> int:
        """Count of confirmed transactions sent from ``sender``."""
        try:
            count = self.w3.eth.get_transaction_count(sender, "latest")
        except RPC_ERRORS as exc:
            raise NetworkError(f"failed to fetch nonce for {sender}: {exc}") from exc
        return _as_int(count, "transaction count")

    def chain_id(self, configured: Optional[int] = None) -> int:
        """
        Return the configured chain id, or ask the node when none is configured.

        Raises:
            ConfigurationError: If neither source yields a positive chain id
        """
        if configured is not None:
            if configured <= 0:
                raise ConfigurationError(f"chain id must be > 0, got {configured}")
            return configured
        try:
            queried = self.w3.eth.chain_id
        except RPC_ERRORS as exc:
            raise NetworkError(f"failed to fetch chain id: {exc}") from exc
        if not queried:
            raise ConfigurationError("no chain id configured and the node did not report one")
        return _as_int(queried, "chain id")

    def read(self, sender: str, chain_id: Optional[int] = None) -> ChainState:
        """
        Read everything needed to build a transfer from ``sender``.

        Args:
            sender: Checksummed sender address
            chain_id: Configured chain id; queried from the node when None

        Returns:
            ChainState(base_fee_per_gas, nonce, chain_id)

        Raises:
            NetworkError: Endpoint unreachable or malformed response
            ConfigurationError: No chain id available
        """
        resolved_chain_id = self.chain_id(chain_id)
        state = ChainState(
            base_fee_per_gas=self.base_fee_per_gas(),
            nonce=self.nonce(sender),
            chain_id=resolved_chain_id,
        )
        logger.debug(
            "chain state: chain_id=%s nonce=%s base_fee=%s wei",
            state.chain_id,
            state.nonce,
            state.base_fee_per_gas,
        )
        return state
