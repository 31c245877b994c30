"""
stellar-explorer: terminal client for the explorer gateway.

    stellar-explorer search GDQP2K...        # local classification, no network call
    stellar-explorer tx <hash> --operations
    stellar-explorer account G... --transactions --limit 5
    stellar-explorer contract C... --events
    stellar-explorer watch ledgers --limit 10
    stellar-explorer network toggle

Network and theme are persisted between runs (see preferences). Output is JSON.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import time
from typing import Any, Callable

from stellar_explorer.client.gateway_client import (
    DEFAULT_GATEWAY_URL,
    GatewayClient,
    GatewayClientError,
    route_search,
)
from stellar_explorer.client.preferences import (
    NETWORKS,
    THEMES,
    load_preferences,
    save_preferences,
    toggle_network,
    toggle_theme,
)
from stellar_explorer.core.identifiers import SEARCH_SUGGESTIONS, classify_search_term

POLL_INTERVAL_SEC = 30.0


def _print(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stellar-explorer", description="Stellar network explorer client.")
    parser.add_argument(
        "--gateway",
        default=os.getenv("STELLAR_EXPLORER_GATEWAY", DEFAULT_GATEWAY_URL),
        help="Gateway base URL (or set STELLAR_EXPLORER_GATEWAY)",
    )
    parser.add_argument("--network", choices=NETWORKS, default=None, help="Override the saved network")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="Classify a term and show its detail route")
    p.add_argument("term")
    p = sub.add_parser("ledger", help="Ledger by sequence")
    p.add_argument("sequence")
    p.add_argument("--transactions", action="store_true", help="List the ledger's transactions instead")
    p.add_argument("--limit", type=int, default=None)
    p = sub.add_parser("tx", help="Transaction by hash")
    p.add_argument("hash")
    p.add_argument("--operations", action="store_true", help="List the transaction's operations instead")
    p = sub.add_parser("account", help="Account by id")
    p.add_argument("account_id")
    p.add_argument("--transactions", action="store_true", help="List recent transactions instead")
    p.add_argument("--limit", type=int, default=None)
    p = sub.add_parser("contract", help="Soroban contract summary")
    p.add_argument("contract_id")
    p.add_argument("--events", action="store_true", help="Show recent events and invocations instead")
    p.add_argument("--limit", type=int, default=None)
    p.add_argument("--cursor", default=None)
    sub.add_parser("stats", help="Network statistics")

    p = sub.add_parser("watch", help="Poll a recent-activity feed")
    p.add_argument("feed", choices=("ledgers", "transactions"))
    p.add_argument("--interval", type=float, default=POLL_INTERVAL_SEC)
    p.add_argument("--limit", type=int, default=10)
    p.add_argument("--iterations", type=int, default=0, help="Stop after N polls (0 = forever)")

    p = sub.add_parser("network", help="Show or change the saved network")
    p.add_argument("value", nargs="?", choices=(*NETWORKS, "toggle"))
    p = sub.add_parser("theme", help="Show or change the saved theme")
    p.add_argument("value", nargs="?", choices=(*THEMES, "toggle"))
    return parser


def watch(
    fetch: Callable[[], list[dict[str, Any]]],
    *,
    interval: float,
    iterations: int = 0,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Poll fetch every interval seconds; a failed poll is reported and polling continues."""
    count = 0
    while True:
        try:
            _print(fetch())
        except GatewayClientError as e:
            print(f"poll failed: {e}", file=sys.stderr)
        count += 1
        if iterations and count >= iterations:
            return 0
        sleep(interval)


def _set_preference(args: argparse.Namespace, field: str, toggle: Callable) -> int:
    prefs = load_preferences()
    if args.value == "toggle":
        toggle(prefs)
    elif args.value:
        setattr(prefs, field, args.value)
    if args.value:
        save_preferences(prefs)
    print(getattr(prefs, field))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "network":
        return _set_preference(args, "network", toggle_network)
    if args.command == "theme":
        return _set_preference(args, "theme", toggle_theme)
    if args.command == "search":
        route = route_search(args.term)
        if route is None:
            _print({"message": "Invalid or unrecognized search format.", "suggestions": SEARCH_SUGGESTIONS})
            return 1
        _print({**classify_search_term(args.term).to_dict(), "route": route})
        return 0

    prefs = load_preferences()
    client = GatewayClient(args.gateway, network=args.network or prefs.network)
    try:
        if args.command == "ledger":
            if args.transactions:
                _print(client.ledger_transactions(args.sequence, limit=args.limit))
            else:
                _print(client.ledger(args.sequence))
        elif args.command == "tx":
            if args.operations:
                _print(client.transaction_operations(args.hash))
            else:
                _print(client.transaction(args.hash))
        elif args.command == "account":
            if args.transactions:
                _print(client.account_transactions(args.account_id, limit=args.limit))
            else:
                _print(client.account(args.account_id))
        elif args.command == "contract":
            if args.events:
                _print(client.contract_events(args.contract_id, limit=args.limit, cursor=args.cursor))
            else:
                _print(client.contract(args.contract_id))
        elif args.command == "stats":
            _print(client.network_stats())
        elif args.command == "watch":
            fetch = client.recent_ledgers if args.feed == "ledgers" else client.recent_transactions
            return watch(
                lambda: fetch(args.limit),
                interval=args.interval,
                iterations=args.iterations,
            )
    except GatewayClientError as e:
        _print({"status": e.status, **(e.payload if isinstance(e.payload, dict) else {"message": str(e.payload)})})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
