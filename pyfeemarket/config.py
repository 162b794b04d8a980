"""Run configuration, read once at the boundary and passed into the pipeline."""

import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError, ValidationError
from .fees import check_fee_overrides
from .submitter import DEFAULT_MAX_POLLS, DEFAULT_POLL_INTERVAL
from .types import parse_units

DEFAULT_AMOUNT_ETH = "0.001"
DEFAULT_CHAIN_ID = 11155111  # Sepolia
DEFAULT_REQUEST_TIMEOUT = 10.0

# CHAIN_ID value meaning "ask the node".
CHAIN_ID_AUTO = "auto"


@dataclass(frozen=True)
class TransferConfig:
    """
    Everything a single transfer needs from its caller.

    Fee overrides are stored in wei; ``None`` means "use the default".
    ``chain_id=None`` means the chain id is queried from the node.
    """

    rpc_url: str
    private_key: str = field(repr=False)
    to_address: str
    amount_eth: str = DEFAULT_AMOUNT_ETH
    chain_id: Optional[int] = DEFAULT_CHAIN_ID
    priority_fee_override: Optional[int] = None
    fee_multiplier_override: Optional[int] = None
    max_fee_override: Optional[int] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_polls: int = DEFAULT_MAX_POLLS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def validate(self) -> None:
        """
        Check required values and override consistency, without any network I/O.

        Raises:
            ConfigurationError: On missing or contradictory values
        """
        for name in ("rpc_url", "private_key", "to_address"):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} is required")
        if self.chain_id is not None and self.chain_id <= 0:
            raise ConfigurationError(f"chain_id must be > 0, got {self.chain_id}")
        if self.max_polls < 1:
            raise ConfigurationError(f"max_polls must be >= 1, got {self.max_polls}")
        if self.poll_interval < 0:
            raise ConfigurationError(f"poll_interval must be >= 0, got {self.poll_interval}")
        if self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be > 0, got {self.request_timeout}")
        check_fee_overrides(
            self.priority_fee_override,
            self.fee_multiplier_override,
            self.max_fee_override,
        )

    def with_overrides(self, **changes) -> "TransferConfig":
        """Return a copy with the non-None ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv: bool = True,
    ) -> "TransferConfig":
        """
        Build a config from environment variables.

        Reads ``.env`` first (without overriding variables already set) unless
        ``dotenv`` is False or an explicit ``environ`` mapping is given.

        Raises:
            ConfigurationError: On missing or malformed values
        """
        if environ is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ

        return cls(
            rpc_url=environ.get("RPC_URL", ""),
            private_key=environ.get("PRIVATE_KEY", ""),
            to_address=environ.get("TO_ADDRESS", ""),
            amount_eth=environ.get("AMOUNT_ETH") or DEFAULT_AMOUNT_ETH,
            chain_id=parse_chain_id(environ.get("CHAIN_ID")),
            priority_fee_override=parse_gwei(environ.get("PRIORITY_GWEI"), "PRIORITY_GWEI"),
            fee_multiplier_override=parse_int(environ.get("FEE_MULTIPLIER"), "FEE_MULTIPLIER"),
            max_fee_override=parse_gwei(environ.get("MAX_FEE_GWEI"), "MAX_FEE_GWEI"),
            poll_interval=parse_float(environ.get("POLL_INTERVAL"), "POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            max_polls=parse_int(environ.get("MAX_POLLS"), "MAX_POLLS", DEFAULT_MAX_POLLS),
            request_timeout=parse_float(environ.get("RPC_TIMEOUT"), "RPC_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        )


def parse_chain_id(raw: Optional[str]) -> Optional[int]:
    """``None``/empty gives the default, ``"auto"`` gives None (query the node)."""
    if raw is None or raw.strip() == "":
        return DEFAULT_CHAIN_ID
    if raw.strip().lower() == CHAIN_ID_AUTO:
        return None
    return parse_int(raw, "CHAIN_ID")


def parse_int(raw: Optional[str], name: str, default: Optional[int] = None) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip(), 10)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def parse_float(raw: Optional[str], name: str, default: float) -> float:
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def parse_gwei(raw: Optional[str], name: str) -> Optional[int]:
    """Parse a decimal gwei amount into wei; empty means unset."""
    if raw is None or raw.strip() == "":
        return None
    try:
        return parse_units(raw, "gwei", name=name)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
