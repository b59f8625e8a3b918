"""Main CLI entry point"""

import sys
import json
import logging
import argparse
from pathlib import Path

from ..core.config import Config
from ..core.connection import Web3Manager
from ..core.exceptions import ElasticError
from ..operations import LiquidityManager, SwapManager


def get_results_dir():
    """Get results directory, create if needed"""
    results_dir = Path.cwd() / "results"
    results_dir.mkdir(exist_ok=True)
    return results_dir


def save_result(filename, data):
    """Save result to JSON file in results directory"""
    results_dir = get_results_dir()
    filepath = results_dir / filename
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2, default=str)
    return filepath


def setup_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def report(result, filename):
    """Print an OperationResult, save it, and return the process exit code"""
    data = result.to_dict()
    data["details"].pop("quote", None)

    print(json.dumps(data, indent=2, default=str))
    filepath = save_result(filename, data)
    print(f"\nSaved to {filepath}", file=sys.stderr)
    return 0 if result.ok else 1


def _load_config(args):
    return Config.load(args.config_dir)


def cmd_quote(args):
    """Quote token0 -> token1 without executing"""
    config = _load_config(args)
    manager = SwapManager(Web3Manager(config), config)
    result = manager.get_quote()

    if result.ok:
        details = result.details
        print("=" * 60)
        print(f"QUOTE: {details['token_in']['amount']} {details['token_in']['symbol']} -> "
              f"{details['token_out']['symbol']}")
        print("=" * 60)
        print(f"\n  Expected output: {details['token_out']['amount']} {details['token_out']['symbol']}")
        print(f"  Price after swap: {details['price_after']['formatted']}")
        print(f"  Ticks crossed: {details['initialized_ticks_crossed']}")
        print(f"  Gas estimate: {details['gas_estimate']} units")
        print("\n" + "=" * 60 + "\n")

    return report(result, "quote.json")


def cmd_trade(args):
    """Quote and swap token0 -> token1"""
    config = _load_config(args)
    manager = SwapManager(Web3Manager(config, require_signer=True), config, dry_run=args.dry_run)
    return report(manager.execute_trade(), "trade.json")


def _liquidity_manager(args):
    config = _load_config(args)
    return LiquidityManager(Web3Manager(config, require_signer=True), config, dry_run=args.dry_run)


def cmd_create(args):
    """Mint a new position around the current tick"""
    return report(_liquidity_manager(args).create_position(), "create_position.json")


def cmd_increase(args):
    """Add liquidity to the open position"""
    return report(_liquidity_manager(args).increase_liquidity(), "increase_liquidity.json")


def cmd_remove(args):
    """Remove part of the open position"""
    return report(_liquidity_manager(args).remove_liquidity(), "remove_liquidity.json")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="elastic-trading",
        description="Scripted operations against a KyberSwap Elastic pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
configuration:
  RPC_URL        Set in .env file (overrides config)
  SUBGRAPH_URL   Set in .env file (overrides config)
  wallet         Set PUBLIC_KEY and PRIVATE_KEY in wallet.env
  pool / tokens  config/elastic.json
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config-dir", help="Directory containing elastic.json")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    quote_parser = subparsers.add_parser("quote", help="Quote token0 -> token1")
    quote_parser.set_defaults(func=cmd_quote)

    trade_parser = subparsers.add_parser("trade", help="Swap token0 -> token1")
    trade_parser.add_argument("--dry-run", action="store_true", help="Encode without sending")
    trade_parser.set_defaults(func=cmd_trade)

    create_parser = subparsers.add_parser("create", help="Create a position around the current price")
    create_parser.add_argument("--dry-run", action="store_true", help="Encode without sending")
    create_parser.set_defaults(func=cmd_create)

    increase_parser = subparsers.add_parser("increase", help="Increase liquidity of the open position")
    increase_parser.add_argument("--dry-run", action="store_true", help="Encode without sending")
    increase_parser.set_defaults(func=cmd_increase)

    remove_parser = subparsers.add_parser("remove", help="Remove part of the open position")
    remove_parser.add_argument("--dry-run", action="store_true", help="Encode without sending")
    remove_parser.set_defaults(func=cmd_remove)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)

    try:
        sys.exit(args.func(args))
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)
    except ElasticError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
