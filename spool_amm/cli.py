"""Command-line entry point for quoting and sizing against explicit reserves."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .config import load_config
from .core.amm import AmmConfig, StepResult, provide_liquidity, read_reserves, remove_liquidity, swap
from .core.cpmm import SwapDirection, curve_reserve_out, quote_swap
from .core.liquidity import size_deposit, size_withdrawal
from .errors import AmmError
from .log import configure_logging
from .state.ledger import TokenLedger
from .state.pools import initialize_pool


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {k: _jsonable(v) for k, v in obj.items()}
    return obj


def _emit(payload: dict) -> None:
    print(json.dumps(_jsonable(payload), sort_keys=True))


def _load(args: argparse.Namespace) -> AmmConfig:
    if args.config is None:
        return AmmConfig()
    return load_config(Path(args.config))


def _cmd_quote_swap(args: argparse.Namespace) -> int:
    config = _load(args)
    quote = quote_swap(
        args.reserve_in,
        args.reserve_out,
        args.amount_in,
        fee_rate=config.fee_rate,
        policy=config.invariant_policy,
    )
    payload = asdict(quote)
    payload["curve_reserve_out"] = curve_reserve_out(args.reserve_in, args.reserve_out, quote.net_in)
    _emit(payload)
    return 0


def _cmd_size_deposit(args: argparse.Namespace) -> int:
    config = _load(args)
    sizing = size_deposit(
        args.amount_a,
        args.amount_b,
        args.reserve_a,
        args.reserve_b,
        args.supply,
        minimum_liquidity=config.minimum_liquidity,
    )
    _emit(asdict(sizing))
    return 0


def _cmd_size_withdrawal(args: argparse.Namespace) -> int:
    sizing = size_withdrawal(args.burn, args.reserve_a, args.reserve_b, args.supply)
    _emit(asdict(sizing))
    return 0


def _cmd_demo(args: argparse.Namespace) -> int:
    config = _load(args)
    user = "0x" + "11" * 32
    pool = initialize_pool(
        asset_a_mint="usdc",
        asset_b_mint="wsol",
        vault_a="usdc_vault",
        vault_b="wsol_vault",
        share_mint="spool_lp",
    )
    ledger = TokenLedger()
    ledger.mint(pool.asset_a_mint, user, 10_000_000)
    ledger.mint(pool.asset_b_mint, user, 10_000_000)

    steps: list[tuple[str, StepResult]] = []
    res = provide_liquidity(pool, ledger, user, 2_000_000, 2_000_000, config=config)
    steps.append(("provide_liquidity", res))
    res = swap(pool, res.ledger, user, 10_000, SwapDirection.A_TO_B, config=config)
    steps.append(("swap", res))
    shares = res.ledger.balance_of(user, pool.share_mint)
    res = remove_liquidity(pool, res.ledger, user, shares, config=config)
    steps.append(("remove_liquidity", res))

    for name, result in steps:
        _emit({"step": name, "effects": asdict(result.effects)})
    reserves = read_reserves(pool, res.ledger)
    _emit({"step": "final", "pool_id": pool.pool_id, "reserves": asdict(reserves)})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spool-amm", description="Constant-product AMM accounting core")
    parser.add_argument("--config", default=None, help="YAML config file (fee, minimum_liquidity, invariant_policy)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("quote-swap", help="price an exact-in swap")
    p.add_argument("--reserve-in", type=int, required=True)
    p.add_argument("--reserve-out", type=int, required=True)
    p.add_argument("--amount-in", type=int, required=True)
    p.set_defaults(func=_cmd_quote_swap)

    p = sub.add_parser("size-deposit", help="compute shares minted for a deposit")
    p.add_argument("--amount-a", type=int, required=True)
    p.add_argument("--amount-b", type=int, required=True)
    p.add_argument("--reserve-a", type=int, default=0)
    p.add_argument("--reserve-b", type=int, default=0)
    p.add_argument("--supply", type=int, default=0)
    p.set_defaults(func=_cmd_size_deposit)

    p = sub.add_parser("size-withdrawal", help="compute reserves returned for a share burn")
    p.add_argument("--burn", type=int, required=True)
    p.add_argument("--reserve-a", type=int, required=True)
    p.add_argument("--reserve-b", type=int, required=True)
    p.add_argument("--supply", type=int, required=True)
    p.set_defaults(func=_cmd_size_withdrawal)

    p = sub.add_parser("demo", help="run deposit, swap and withdrawal against an in-memory ledger")
    p.set_defaults(func=_cmd_demo)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    try:
        return args.func(args)
    except AmmError as exc:
        print(f"{exc.code}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
