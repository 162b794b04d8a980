"""
PyFeeMarket - EIP-1559 native transfers with web3.py

Builds, signs, submits and confirms a single fee-market (type 0x02) value
transfer: fee bounds derived from the current base fee, nonce read from the
chain, and a bounded wait for the receipt.
"""

from .builder import TRANSFER_GAS_LIMIT, TransferBuilder, assemble_transfer
from .chain import ChainState, ChainStateReader, connect
from .config import TransferConfig
from .errors import (
    ConfigurationError,
    ConfirmationTimeout,
    FeeMarketError,
    KeyDerivationError,
    NetworkError,
    SubmissionRejected,
    ValidationError,
)
from .fees import (
    DEFAULT_FEE_MULTIPLIER,
    DEFAULT_PRIORITY_FEE,
    check_fee_overrides,
    estimate_fees,
)
from .models import (
    FeeParameters,
    Signature,
    SignedTransaction,
    TransactionReceipt,
    TransferResult,
    TransferState,
    UnsignedTransaction,
)
from .signer import Credential
from .submitter import Submitter
from .transfer import prepare_transfer, send_transfer
from .types import Address, as_address, parse_ether, parse_units

__version__ = "0.1.0"

__all__ = [
    "Address",
    "ChainState",
    "ChainStateReader",
    "ConfigurationError",
    "ConfirmationTimeout",
    "Credential",
    "DEFAULT_FEE_MULTIPLIER",
    "DEFAULT_PRIORITY_FEE",
    "FeeMarketError",
    "FeeParameters",
    "KeyDerivationError",
    "NetworkError",
    "Signature",
    "SignedTransaction",
    "Submitter",
    "SubmissionRejected",
    "TRANSFER_GAS_LIMIT",
    "TransactionReceipt",
    "TransferBuilder",
    "TransferConfig",
    "TransferResult",
    "TransferState",
    "UnsignedTransaction",
    "ValidationError",
    "as_address",
    "assemble_transfer",
    "check_fee_overrides",
    "connect",
    "estimate_fees",
    "parse_ether",
    "parse_units",
    "prepare_transfer",
    "send_transfer",
]
