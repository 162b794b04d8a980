"""
Example: Send From Environment

Run the whole pipeline from a .env file (RPC_URL, PRIVATE_KEY, TO_ADDRESS,
and optionally AMOUNT_ETH, CHAIN_ID, PRIORITY_GWEI, FEE_MULTIPLIER).

Usage:
    python examples/send_from_env.py
"""

from pyfeemarket import ConfirmationTimeout, TransferConfig, send_transfer

config = TransferConfig.from_env()

try:
    result = send_transfer(config)
except ConfirmationTimeout as exc:
    print(f"Still pending: 0x{exc.transaction_hash.hex()}")
else:
    status = "success" if result.succeeded else "failed"
    print(f"0x{result.transaction_hash.hex()} mined in block {result.receipt.block_number} ({status})")
