"""Fee estimation for type-2 transactions.

The max fee leaves headroom for the base fee to grow while the transaction
waits for inclusion::

    max_fee_per_gas = base_fee_per_gas * multiplier + priority_fee
"""

import logging
from typing import Optional

from eth_utils import from_wei

from .errors import ConfigurationError
from .models import FeeParameters
from .types import as_uint256

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_FEE = 2_000_000_000  # 2 gwei
DEFAULT_FEE_MULTIPLIER = 2


def check_fee_overrides(
    priority_fee_override: Optional[int] = None,
    fee_multiplier_override: Optional[int] = None,
    max_fee_override: Optional[int] = None,
) -> None:
    """
    Check caller-supplied overrides on their own, before any network call.

    Raises:
        ConfigurationError: If an override is out of range or the priority
            fee exceeds the max fee cap. Nothing is clamped.
    """
    if priority_fee_override is not None and priority_fee_override < 0:
        raise ConfigurationError(f"priority fee override must be >= 0, got {priority_fee_override}")
    if fee_multiplier_override is not None and fee_multiplier_override < 1:
        raise ConfigurationError(f"fee multiplier must be >= 1, got {fee_multiplier_override}")
    if max_fee_override is not None:
        if max_fee_override < 0:
            raise ConfigurationError(f"max fee override must be >= 0, got {max_fee_override}")
        priority = DEFAULT_PRIORITY_FEE if priority_fee_override is None else priority_fee_override
        if priority > max_fee_override:
            raise ConfigurationError(
                f"priority fee {priority} wei exceeds max fee cap {max_fee_override} wei"
            )


def estimate_fees(
    base_fee_per_gas: int,
    priority_fee_override: Optional[int] = None,
    fee_multiplier_override: Optional[int] = None,
    max_fee_override: Optional[int] = None,
) -> FeeParameters:
    """
    Turn the current base fee and optional overrides into FeeParameters.

    Args:
        base_fee_per_gas: Base fee of the latest block, in wei
        priority_fee_override: Priority fee in wei (default 2 gwei)
        fee_multiplier_override: Base-fee multiplier (default 2, must be >= 1)
        max_fee_override: Explicit max fee cap in wei, replaces the computed value

    Returns:
        FeeParameters with max_fee_per_gas >= max_priority_fee_per_gas

    Raises:
        ConfigurationError: On out-of-range or conflicting overrides
        ValidationError: If any value overflows uint256
    """
    check_fee_overrides(priority_fee_override, fee_multiplier_override, max_fee_override)
    if base_fee_per_gas < 0:
        raise ConfigurationError(f"base fee must be >= 0, got {base_fee_per_gas}")

    priority = DEFAULT_PRIORITY_FEE if priority_fee_override is None else priority_fee_override
    multiplier = DEFAULT_FEE_MULTIPLIER if fee_multiplier_override is None else fee_multiplier_override

    as_uint256(base_fee_per_gas, "base_fee_per_gas")
    as_uint256(priority, "max_priority_fee_per_gas")

    if max_fee_override is not None:
        max_fee = as_uint256(max_fee_override, "max_fee_per_gas")
        if max_fee < base_fee_per_gas:
            logger.warning(
                "max fee cap %s gwei is below the current base fee %s gwei; "
                "the transaction may stay pending",
                from_wei(max_fee, "gwei"),
                from_wei(base_fee_per_gas, "gwei"),
            )
    else:
        scaled = as_uint256(base_fee_per_gas * multiplier, "base_fee_per_gas * multiplier")
        max_fee = as_uint256(scaled + priority, "max_fee_per_gas")

    fees = FeeParameters(max_priority_fee_per_gas=priority, max_fee_per_gas=max_fee)
    logger.debug(
        "fees: base=%s wei multiplier=%s priority=%s wei max=%s wei",
        base_fee_per_gas,
        multiplier,
        fees.max_priority_fee_per_gas,
        fees.max_fee_per_gas,
    )
    return fees
