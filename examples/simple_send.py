"""
Example: Simple Send

Send a small amount of ether as a type-2 transaction, step by step.

Usage:
    RPC_URL=https://... PRIVATE_KEY=0x... python examples/simple_send.py
"""

import os

from pyfeemarket import (
    ChainStateReader,
    Credential,
    Submitter,
    assemble_transfer,
    connect,
    estimate_fees,
    parse_ether,
)

# Connect to the node
w3 = connect(os.environ.get("RPC_URL", "https://ethereum-sepolia-rpc.publicnode.com"))

# Get private key from environment
private_key = os.environ.get("PRIVATE_KEY")
if not private_key:
    raise ValueError("PRIVATE_KEY environment variable not set")

credential = Credential.from_key(private_key)

# Read chain state and derive fees
state = ChainStateReader(w3).read(credential.address)
fees = estimate_fees(state.base_fee_per_gas)

# Assemble and sign the transfer
tx = assemble_transfer(
    to="0x000000000000000000000000000000000000dEaD",
    value=parse_ether("0.0001"),
    fees=fees,
    nonce=state.nonce,
    chain_id=state.chain_id,
)
signed = credential.sign(tx)

# Send transaction
submitter = Submitter(w3, poll_interval=2.0, max_polls=90)
tx_hash = submitter.submit(signed)
print(f"Transaction hash: 0x{tx_hash.hex()}")

# Wait for confirmation
print("Waiting for confirmation...")
receipt = submitter.wait_for_receipt(tx_hash)
print(f"Confirmed in block {receipt.block_number} (gas used: {receipt.gas_used})")
