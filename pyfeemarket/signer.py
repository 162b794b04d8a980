"""Signing credential scoped to a single run."""

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .errors import KeyDerivationError
from .models import Signature, SignedTransaction, UnsignedTransaction
from .types import Address, as_address


class Credential:
    """
    A private key held in memory for the duration of one transfer.

    Passed explicitly to whatever needs to sign; never stored globally.
    """

    def __init__(self, account: LocalAccount):
        self._account = account

    @classmethod
    def from_key(cls, private_key: str) -> "Credential":
        """
        Load a credential from a hex private key (with or without 0x).

        Raises:
            KeyDerivationError: If no address can be derived from the key
        """
        try:
            account = Account.from_key(private_key)
        except (ValueError, TypeError) as exc:
            raise KeyDerivationError("cannot derive an address from the supplied private key") from exc
        return cls(account)

    @property
    def address(self) -> str:
        """Checksummed sender address."""
        return self._account.address

    @property
    def address_bytes(self) -> Address:
        return as_address(self._account.address)

    def sign(self, tx: UnsignedTransaction) -> SignedTransaction:
        """
        Sign the transaction's type-2 signing hash.

        Returns a new SignedTransaction; ``tx`` is left untouched.
        """
        signed_msg = self._account.unsafe_sign_hash(tx.signing_hash())
        sig = Signature.from_vrs(signed_msg.v, signed_msg.r, signed_msg.s)
        return SignedTransaction(transaction=tx, signature=sig, sender=self.address_bytes)

    def __repr__(self) -> str:
        return f"Credential(address={self.address})"
