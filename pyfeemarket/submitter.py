"""Broadcast of signed transfers and bounded confirmation polling."""

import logging
import time
from typing import Callable, Optional

from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3RPCError

from .chain import RPC_ERRORS
from .errors import ConfirmationTimeout, NetworkError, SubmissionRejected
from .models import (
    SignedTransaction,
    TransactionReceipt,
    TransferResult,
    TransferState,
    check_transition,
)
from .types import Hash32, as_hash32

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_MAX_POLLS = 60


def rejection_reason(exc: Web3RPCError) -> str:
    """Extract the node's message from a JSON-RPC error, verbatim."""
    response = getattr(exc, "rpc_response", None)
    if isinstance(response, dict):
        error = response.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    message = getattr(exc, "message", None)
    return str(message) if message else str(exc)


class Submitter:
    """
    Submits a signed transaction once and waits for its receipt.

    The wait is a bounded loop: at most ``max_polls`` receipt queries,
    separated by ``poll_interval`` seconds through the injected ``sleep``.
    Tests pass a fake ``sleep`` and ``clock`` to simulate elapsed time.

    One Submitter handles exactly one transaction; ``state`` only moves forward.
    """

    def __init__(
        self,
        w3: Web3,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_polls: int = DEFAULT_MAX_POLLS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_polls < 1:
            raise ValueError("max_polls must be >= 1")
        if poll_interval < 0:
            raise ValueError("poll_interval must be >= 0")
        self.w3 = w3
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self._sleep = sleep
        self._clock = clock
        self.state = TransferState.SIGNED

    def _advance(self, new: TransferState) -> None:
        self.state = check_transition(self.state, new)

    def submit(self, signed: SignedTransaction) -> Hash32:
        """
        Broadcast the raw transaction.

        Returns:
            Transaction hash reported by the node

        Raises:
            SubmissionRejected: The node refused it (nonce, balance, fee...)
            NetworkError: The endpoint could not be reached
        """
        if self.state is not TransferState.SIGNED:
            raise RuntimeError(f"transaction already {self.state.value}; refusing to resubmit")
        raw = signed.encode()
        try:
            tx_hash = self.w3.eth.send_raw_transaction(raw)
        except Web3RPCError as exc:
            self._advance(TransferState.REJECTED)
            reason = rejection_reason(exc)
            logger.info("transaction rejected: %s", reason)
            raise SubmissionRejected(reason) from exc
        except RPC_ERRORS as exc:
            raise NetworkError(f"failed to submit transaction: {exc}") from exc

        self._advance(TransferState.SUBMITTED)
        try:
            tx_hash = as_hash32(bytes(tx_hash))
        except (TypeError, ValueError) as exc:
            raise NetworkError(f"malformed transaction hash from node: {tx_hash!r}") from exc
        if tx_hash != signed.hash():
            logger.warning(
                "node returned hash 0x%s, expected 0x%s", tx_hash.hex(), signed.hash().hex()
            )
        logger.info("submitted 0x%s", tx_hash.hex())
        return tx_hash

    def poll_once(self, tx_hash: Hash32) -> Optional[TransactionReceipt]:
        """Query the receipt once; None while the transaction is pending."""
        try:
            receipt = self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except RPC_ERRORS as exc:
            logger.warning("receipt query for 0x%s failed: %s", tx_hash.hex(), exc)
            return None
        if receipt is None:
            return None
        return TransactionReceipt.from_rpc(receipt)

    def wait_for_receipt(self, tx_hash: Hash32) -> TransactionReceipt:
        """
        Poll until a receipt appears or ``max_polls`` is exhausted.

        Raises:
            ConfirmationTimeout: No receipt after max_polls queries
        """
        started = self._clock()
        for attempt in range(1, self.max_polls + 1):
            receipt = self.poll_once(tx_hash)
            if receipt is not None:
                self._advance(TransferState.CONFIRMED)
                logger.info(
                    "0x%s mined in block %s (status %s, gas used %s)",
                    tx_hash.hex(),
                    receipt.block_number,
                    receipt.status,
                    receipt.gas_used,
                )
                return receipt
            logger.debug("0x%s pending (poll %s/%s)", tx_hash.hex(), attempt, self.max_polls)
            if attempt < self.max_polls:
                self._sleep(self.poll_interval)

        self._advance(TransferState.TIMED_OUT)
        raise ConfirmationTimeout(tx_hash, self.max_polls, waited=self._clock() - started)

    def send(
        self,
        signed: SignedTransaction,
        on_submitted: Optional[Callable[[Hash32], None]] = None,
    ) -> TransferResult:
        """
        Submit ``signed`` and wait for its receipt.

        ``on_submitted`` is called with the transaction hash once the node has
        accepted it, before the first poll. A rejected submission raises before
        any poll. Nothing is resubmitted.
        """
        tx_hash = self.submit(signed)
        if on_submitted is not None:
            on_submitted(tx_hash)
        receipt = self.wait_for_receipt(tx_hash)
        return TransferResult(state=self.state, transaction_hash=tx_hash, receipt=receipt)
