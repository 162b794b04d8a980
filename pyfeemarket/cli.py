"""Command-line entry point: send one fee-market transfer and report the outcome."""

import argparse
import logging
import sys
import time
from dataclasses import replace
from typing import Callable, List, Mapping, Optional

from eth_utils import from_wei
from web3 import Web3

from .config import CHAIN_ID_AUTO, TransferConfig, parse_gwei
from .errors import (
    ConfigurationError,
    ConfirmationTimeout,
    FeeMarketError,
    SubmissionRejected,
)
from .models import SignedTransaction
from .transfer import send_transfer
from .types import Address, Hash32

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_PENDING = 75  # EX_TEMPFAIL: submitted, check later


def format_address(addr: Address) -> str:
    """Shorten an address for display: 0x123456…abcd."""
    s = "0x" + bytes(addr).hex()
    if len(s) > 12:
        return f"{s[:8]}…{s[-4:]}"
    return s


def format_gwei(wei: int) -> str:
    s = f"{from_wei(wei, 'gwei'):f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyfeemarket",
        description="Send a native-asset transfer as an EIP-1559 (type-2) transaction.",
        epilog="Unset options fall back to RPC_URL, PRIVATE_KEY, TO_ADDRESS, AMOUNT_ETH, "
        "CHAIN_ID, PRIORITY_GWEI, FEE_MULTIPLIER, MAX_FEE_GWEI, POLL_INTERVAL, MAX_POLLS "
        "and RPC_TIMEOUT from the environment or a .env file.",
    )
    parser.add_argument("--rpc-url")
    parser.add_argument("--to", dest="to_address", help="recipient address")
    parser.add_argument("--amount", dest="amount_eth", help="amount in ether, e.g. 0.01")
    parser.add_argument("--chain-id", help=f"chain id, or '{CHAIN_ID_AUTO}' to ask the node")
    parser.add_argument("--priority-gwei", help="priority fee per gas in gwei (default 2)")
    parser.add_argument("--fee-multiplier", type=int, help="base fee multiplier (default 2)")
    parser.add_argument("--max-fee-gwei", help="explicit max fee per gas in gwei")
    parser.add_argument("--poll-interval", type=float, help="seconds between receipt polls")
    parser.add_argument("--max-polls", type=int, help="receipt polls before giving up")
    parser.add_argument("--rpc-timeout", type=float, dest="request_timeout")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def _apply_args(config: TransferConfig, args: argparse.Namespace) -> TransferConfig:
    config = config.with_overrides(
        rpc_url=args.rpc_url,
        to_address=args.to_address,
        amount_eth=args.amount_eth,
        fee_multiplier_override=args.fee_multiplier,
        priority_fee_override=parse_gwei(args.priority_gwei, "--priority-gwei"),
        max_fee_override=parse_gwei(args.max_fee_gwei, "--max-fee-gwei"),
        poll_interval=args.poll_interval,
        max_polls=args.max_polls,
        request_timeout=args.request_timeout,
    )
    if args.chain_id is not None:
        if args.chain_id.strip().lower() == CHAIN_ID_AUTO:
            config = replace(config, chain_id=None)
        else:
            try:
                config = replace(config, chain_id=int(args.chain_id, 10))
            except ValueError as exc:
                raise ConfigurationError(f"--chain-id must be an integer, got {args.chain_id!r}") from exc
    return config


def run(
    config: TransferConfig,
    w3: Optional[Web3] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Send the transfer described by ``config``; return the process exit status."""

    def report_signed(signed: SignedTransaction) -> None:
        tx = signed.transaction
        print(
            f"From={format_address(signed.sender)} "
            f"To={format_address(tx.to)} "
            f"Amount={config.amount_eth} ETH"
        )
        print(
            f"type-2 nonce={tx.nonce} chain={tx.chain_id} "
            f"maxFee={format_gwei(tx.max_fee_per_gas)} gwei "
            f"priority={format_gwei(tx.max_priority_fee_per_gas)} gwei"
        )

    def report_submitted(tx_hash: Hash32) -> None:
        print(f"submitted: 0x{tx_hash.hex()}")

    result = send_transfer(
        config,
        w3=w3,
        sleep=sleep,
        on_signed=report_signed,
        on_submitted=report_submitted,
    )
    receipt = result.receipt
    status = "success" if receipt.succeeded else "failed"
    print(f"mined in block {receipt.block_number} (status: {status})")
    return EXIT_OK if result.succeeded else EXIT_FAILURE


def main(
    argv: Optional[List[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    w3: Optional[Web3] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = _apply_args(TransferConfig.from_env(environ), args)
        return run(config, w3=w3, sleep=sleep)
    except SubmissionRejected as exc:
        print(f"submission rejected: {exc.reason}", file=sys.stderr)
        return EXIT_FAILURE
    except ConfirmationTimeout as exc:
        print(
            f"pending: 0x{exc.transaction_hash.hex()} not mined after {exc.polls} polls; check later",
            file=sys.stderr,
        )
        return EXIT_PENDING
    except FeeMarketError as exc:
        print(f"ERROR ({type(exc).__name__}): {exc}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
