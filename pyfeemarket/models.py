"""Strongly-typed data models for fee-market (type-2) transfers."""

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import rlp
from eth_account import Account
from eth_utils import keccak

from .errors import NetworkError, ValidationError
from .types import Address, Hash32, as_address, as_hash32, as_uint64, as_uint256


@dataclass(frozen=True)
class FeeParameters:
    """Per-gas fee bounds for a type-2 transaction, in wei."""

    max_priority_fee_per_gas: int
    max_fee_per_gas: int

    def __post_init__(self) -> None:
        as_uint256(self.max_priority_fee_per_gas, "max_priority_fee_per_gas")
        as_uint256(self.max_fee_per_gas, "max_fee_per_gas")
        if self.max_priority_fee_per_gas > self.max_fee_per_gas:
            raise ValidationError("max_priority_fee_per_gas cannot exceed max_fee_per_gas")


@dataclass(frozen=True)
class Signature:
    """secp256k1 signature as carried by typed transactions (y_parity, r, s)."""

    y_parity: int
    r: int
    s: int

    def __post_init__(self) -> None:
        if self.y_parity not in (0, 1):
            raise ValidationError(f"y_parity must be 0 or 1, got {self.y_parity}")

    def as_rlp_list(self) -> list:
        return [self.y_parity, self.r, self.s]

    @classmethod
    def from_vrs(cls, v: int, r: int, s: int) -> "Signature":
        """Build from an eth_account ``v`` (27/28 or 0/1)."""
        return cls(y_parity=v - 27 if v >= 27 else v, r=r, s=s)


@dataclass(frozen=True)
class UnsignedTransaction:
    """
    Fee-market transaction (EIP-1559, type 0x02) for a plain value transfer.

    Immutable once built. There is no gas price field: the type-2 format is
    implied by the two fee fields. ``data`` and ``access_list`` stay empty.
    """

    TRANSACTION_TYPE: int = field(default=0x02, init=False, repr=False)

    chain_id: int
    nonce: int
    to: Address
    value: int
    gas_limit: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    data: bytes = b""
    access_list: tuple = ()

    def validate(self) -> None:
        """Validate the transaction fields."""
        if as_uint64(self.chain_id, "chain_id") == 0:
            raise ValidationError("chain_id must be > 0")
        as_uint64(self.nonce, "nonce")
        as_uint64(self.gas_limit, "gas_limit")
        if self.gas_limit <= 0:
            raise ValidationError("gas_limit must be > 0")
        as_uint256(self.value, "value")
        if len(bytes(self.to)) != 20:
            raise ValidationError("to must be a 20-byte address")
        if self.data or self.access_list:
            raise ValidationError("plain transfers carry no data and no access list")
        FeeParameters(
            max_priority_fee_per_gas=self.max_priority_fee_per_gas,
            max_fee_per_gas=self.max_fee_per_gas,
        )

    @property
    def fees(self) -> FeeParameters:
        return FeeParameters(
            max_priority_fee_per_gas=self.max_priority_fee_per_gas,
            max_fee_per_gas=self.max_fee_per_gas,
        )

    def as_rlp_list(self) -> list:
        return [
            self.chain_id,
            self.nonce,
            self.max_priority_fee_per_gas,
            self.max_fee_per_gas,
            self.gas_limit,
            bytes(self.to),
            self.value,
            self.data,
            list(self.access_list),
        ]

    def signing_payload(self) -> bytes:
        """
        Canonical payload covered by the signature.

        Returns:
            0x02 || rlp([chain_id, nonce, max_priority_fee_per_gas,
            max_fee_per_gas, gas_limit, to, value, data, access_list])
        """
        self.validate()
        return bytes([self.TRANSACTION_TYPE]) + rlp.encode(self.as_rlp_list())

    def signing_hash(self) -> Hash32:
        """Get the 32-byte hash to sign."""
        return Hash32(keccak(self.signing_payload()))


@dataclass(frozen=True)
class SignedTransaction:
    """An UnsignedTransaction together with the sender's signature over it."""

    transaction: UnsignedTransaction
    signature: Signature
    sender: Address

    def encode(self) -> bytes:
        """
        Encode the raw transaction: 0x02 || rlp([9 fields, y_parity, r, s])

        Returns:
            Bytes suitable for eth_sendRawTransaction
        """
        self.transaction.validate()
        fields = self.transaction.as_rlp_list() + self.signature.as_rlp_list()
        return bytes([self.transaction.TRANSACTION_TYPE]) + rlp.encode(fields)

    def hash(self) -> Hash32:
        """Get transaction hash."""
        return Hash32(keccak(self.encode()))

    def recover_sender(self) -> Address:
        """Recover the signer's address from the encoded transaction alone."""
        return as_address(Account.recover_transaction(self.encode()))


@dataclass(frozen=True)
class TransactionReceipt:
    """Network-confirmed record of inclusion."""

    transaction_hash: Hash32
    block_number: int
    block_hash: Hash32
    status: int
    gas_used: int
    effective_gas_price: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_rpc(cls, receipt: Mapping[str, Any]) -> "TransactionReceipt":
        """Build from a web3 receipt (``AttributeDict`` or plain mapping)."""
        try:
            return cls(
                transaction_hash=as_hash32(receipt["transactionHash"]),
                block_number=int(receipt["blockNumber"]),
                block_hash=as_hash32(receipt["blockHash"]),
                status=int(receipt["status"]),
                gas_used=int(receipt["gasUsed"]),
                effective_gas_price=(
                    int(receipt["effectiveGasPrice"])
                    if receipt.get("effectiveGasPrice") is not None
                    else None
                ),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise NetworkError(f"malformed transaction receipt: {receipt!r}") from exc


class TransferState(enum.Enum):
    """Lifecycle of a single transfer. Transitions only move forward."""

    BUILT = "built"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferState.CONFIRMED, TransferState.REJECTED, TransferState.TIMED_OUT)


_TRANSITIONS = {
    TransferState.BUILT: (TransferState.SIGNED,),
    TransferState.SIGNED: (TransferState.SUBMITTED, TransferState.REJECTED),
    TransferState.SUBMITTED: (TransferState.CONFIRMED, TransferState.TIMED_OUT),
}


def check_transition(current: TransferState, new: TransferState) -> TransferState:
    if new not in _TRANSITIONS.get(current, ()):
        raise RuntimeError(f"illegal transfer state transition {current.value} -> {new.value}")
    return new


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a transfer that reached a receipt."""

    state: TransferState
    transaction_hash: Hash32
    receipt: TransactionReceipt

    @property
    def succeeded(self) -> bool:
        return self.state is TransferState.CONFIRMED and self.receipt.succeeded
