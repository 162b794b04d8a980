"""The transfer pipeline: chain state -> fees -> assembly -> signing -> submission."""

import logging
import time
from typing import Callable, Optional

from web3 import Web3

from .builder import assemble_transfer
from .chain import ChainStateReader, connect
from .config import TransferConfig
from .fees import estimate_fees
from .models import SignedTransaction, TransferResult
from .signer import Credential
from .submitter import Submitter
from .types import Hash32, as_address, parse_ether

logger = logging.getLogger(__name__)


def prepare_transfer(
    config: TransferConfig,
    credential: Credential,
    w3: Web3,
) -> SignedTransaction:
    """
    Build and sign the transfer described by ``config``.

    Inputs are validated before the first RPC call, so a bad recipient,
    amount or fee override never costs a network round trip.

    Raises:
        ConfigurationError: Missing or contradictory configuration
        ValidationError: Malformed recipient or amount
        NetworkError: Chain state could not be read
    """
    config.validate()
    return _build_and_sign(config, credential, w3)


def _build_and_sign(config: TransferConfig, credential: Credential, w3: Web3) -> SignedTransaction:
    # config must already be validated
    recipient = as_address(config.to_address)
    value = parse_ether(config.amount_eth)

    state = ChainStateReader(w3).read(credential.address, chain_id=config.chain_id)
    fees = estimate_fees(
        state.base_fee_per_gas,
        priority_fee_override=config.priority_fee_override,
        fee_multiplier_override=config.fee_multiplier_override,
        max_fee_override=config.max_fee_override,
    )
    tx = assemble_transfer(
        to=recipient,
        value=value,
        fees=fees,
        nonce=state.nonce,
        chain_id=state.chain_id,
    )
    signed = credential.sign(tx)
    logger.debug("signed transfer 0x%s (nonce %s, chain %s)", signed.hash().hex(), tx.nonce, tx.chain_id)
    return signed


def send_transfer(
    config: TransferConfig,
    credential: Optional[Credential] = None,
    w3: Optional[Web3] = None,
    sleep: Callable[[float], None] = time.sleep,
    on_signed: Optional[Callable[[SignedTransaction], None]] = None,
    on_submitted: Optional[Callable[[Hash32], None]] = None,
) -> TransferResult:
    """
    Run the whole pipeline once and return the confirmed result.

    Args:
        on_signed: Called with the signed transaction before it is broadcast
        on_submitted: Called with the transaction hash once the node accepts it

    Raises:
        SubmissionRejected: The node refused the transaction
        ConfirmationTimeout: Submitted but not mined within max_polls
        (plus everything prepare_transfer raises)
    """
    config.validate()
    if credential is None:
        credential = Credential.from_key(config.private_key)
    if w3 is None:
        w3 = connect(config.rpc_url, request_timeout=config.request_timeout)

    signed = _build_and_sign(config, credential, w3)
    if on_signed is not None:
        on_signed(signed)
    submitter = Submitter(
        w3,
        poll_interval=config.poll_interval,
        max_polls=config.max_polls,
        sleep=sleep,
    )
    return submitter.send(signed, on_submitted=on_submitted)
