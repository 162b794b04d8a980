"""Assembly of type-2 transactions for plain value transfers."""

from dataclasses import dataclass
from typing import Optional

from .errors import ValidationError
from .models import FeeParameters, UnsignedTransaction
from .types import BytesLike, as_address, as_uint64, as_uint256

# Intrinsic gas of a value transfer with no calldata.
TRANSFER_GAS_LIMIT = 21_000


def assemble_transfer(
    to: BytesLike,
    value: int,
    fees: FeeParameters,
    nonce: int,
    chain_id: int,
    gas_limit: int = TRANSFER_GAS_LIMIT,
) -> UnsignedTransaction:
    """
    Build an unsigned type-2 transfer.

    Args:
        to: Recipient address (0x-prefixed hex or 20 bytes)
        value: Amount in wei
        fees: Priority fee and max fee per gas
        nonce: Sender's next nonce
        chain_id: Replay-protection domain
        gas_limit: Gas limit, 21000 for a plain transfer

    Returns:
        A validated, immutable UnsignedTransaction with empty data and access list

    Raises:
        ValidationError: If any field is malformed or out of range
    """
    recipient = as_address(to)
    as_uint256(value, "value")
    as_uint64(nonce, "nonce")
    if as_uint64(chain_id, "chain_id") == 0:
        raise ValidationError("chain_id must be > 0")
    if not isinstance(fees, FeeParameters):
        raise ValidationError(f"fees must be FeeParameters, got {type(fees).__name__}")

    tx = UnsignedTransaction(
        chain_id=chain_id,
        nonce=nonce,
        to=recipient,
        value=value,
        gas_limit=gas_limit,
        max_fee_per_gas=fees.max_fee_per_gas,
        max_priority_fee_per_gas=fees.max_priority_fee_per_gas,
    )
    tx.validate()
    return tx


@dataclass
class TransferBuilder:
    """
    Fluent builder for transfer transactions.

    Example:
        tx = (TransferBuilder(chain_id=11155111)
            .set_nonce(5)
            .set_fees(FeeParameters(2_000_000_000, 22_000_000_000))
            .to("0xRecipient...")
            .value(10**16)
            .build())
    """

    chain_id: Optional[int] = None
    nonce: int = 0
    gas_limit: int = TRANSFER_GAS_LIMIT
    fees: Optional[FeeParameters] = None
    recipient: Optional[BytesLike] = None
    amount: int = 0

    def set_chain_id(self, chain_id: int) -> "TransferBuilder":
        self.chain_id = chain_id
        return self

    def set_nonce(self, nonce: int) -> "TransferBuilder":
        self.nonce = nonce
        return self

    def set_gas(self, gas_limit: int) -> "TransferBuilder":
        self.gas_limit = gas_limit
        return self

    def set_fees(self, fees: FeeParameters) -> "TransferBuilder":
        self.fees = fees
        return self

    def to(self, recipient: BytesLike) -> "TransferBuilder":
        self.recipient = recipient
        return self

    def value(self, amount: int) -> "TransferBuilder":
        self.amount = amount
        return self

    def build(self) -> UnsignedTransaction:
        """
        Build and validate the transaction.

        Raises:
            ValidationError: If the chain id, recipient or fees are missing, or validation fails
        """
        if self.chain_id is None:
            raise ValidationError("chain_id is required")
        if self.recipient is None:
            raise ValidationError("recipient is required")
        if self.fees is None:
            raise ValidationError("fees are required")
        return assemble_transfer(
            to=self.recipient,
            value=self.amount,
            fees=self.fees,
            nonce=self.nonce,
            chain_id=self.chain_id,
            gas_limit=self.gas_limit,
        )
