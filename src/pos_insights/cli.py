"""Command-line interface for POS Insights.

Examples:
  # Narrated answer (needs ANTHROPIC_API_KEY)
  pos-insights ask "How are sales today compared to yesterday?"

  # Chat events: slash commands, mentions and direct messages
  pos-insights chat "/sales"
  pos-insights chat "<@U012AB3CD> top sellers today?"

  # Data only, no language model
  pos-insights data "top sellers and delivery channels"
  pos-insights sales
  pos-insights metrics --days 7 --json
  pos-insights compare --period weekly
  pos-insights top --days 7 --limit 5
  pos-insights search "cold brew" --days 14
  pos-insights lookup items "cold brew"
  pos-insights lookup customers "doordash"

  # Health endpoint
  pos-insights serve --port 3000

Environment:
  LIGHTSPEED_ACCOUNT_ID, LIGHTSPEED_SHOP_ID, LIGHTSPEED_TOKEN (or --config-dir)
  ANTHROPIC_API_KEY, CLAUDE_MODEL, BUSINESS_NAME, BUSINESS_TIMEZONE
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any

from pos_insights.assistant.chat import (
    MENTION_RE,
    handle_command,
    handle_direct_message,
    handle_mention,
)
from pos_insights.assistant.formatters import (
    format_channel_block,
    format_comparison_block,
    format_today_block,
    format_top_products_block,
    period_title,
)
from pos_insights.assistant.service import Assistant
from pos_insights.config import AssistantConfig, PosConfig, load_pos_config
from pos_insights.exceptions import InsightsError
from pos_insights.pos.client import LightspeedClient
from pos_insights.sales.compare import PERIOD_DAYS, Comparator
from pos_insights.sales.metrics import SalesAggregator
from pos_insights.sales.ranking import TopProductsRanker
from pos_insights.sales.search import SalesSearch
from pos_insights.windows import date_window

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pos-insights", description="Live POS sales insights.")
    parser.add_argument(
        "--config-dir",
        type=str,
        default=os.environ.get("POS_CONFIG_DIR"),
        help="Directory with bot-config.json and lightspeed-token.txt (fallback to env vars)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("ask", help="Answer a question with the language model")
    p.add_argument("text", help="Question text")
    p.add_argument("--context", action="store_true", help="Always include live data")

    p = sub.add_parser("chat", help="Handle a chat message: /command, @mention or direct message")
    p.add_argument("text", help="Message text, e.g. '/sales' or '<@U123> how are sales?'")

    p = sub.add_parser("data", help="Show the live data block for a question")
    p.add_argument("text", help="Question text")

    sub.add_parser("sales", help="Today's sales summary")

    p = sub.add_parser("metrics", help="Sales metrics for a window")
    p.add_argument("--days-ago", type=int, default=0, help="Days before today the window ends")
    p.add_argument("--days", type=int, default=1, help="Window length in days")
    p.add_argument("--json", action="store_true", help="Print JSON")

    p = sub.add_parser("compare", help="Compare with the previous period")
    p.add_argument("--period", choices=sorted(PERIOD_DAYS), default="daily")
    p.add_argument("--json", action="store_true", help="Print JSON")

    p = sub.add_parser("top", help="Top products by revenue")
    p.add_argument("--days-ago", type=int, default=0)
    p.add_argument("--days", type=int, default=1)
    p.add_argument("--limit", type=int, default=10)
    p.add_argument("--json", action="store_true", help="Print JSON")

    p = sub.add_parser("search", help="Search sales by customer or product")
    p.add_argument("term", help="Text to look for")
    p.add_argument("--days", type=int, default=7)

    p = sub.add_parser("lookup", help="Find catalog items or customers by name")
    p.add_argument("kind", choices=["items", "customers"])
    p.add_argument("text", help="Text the description or name contains")
    p.add_argument("--limit", type=int, default=10)

    p = sub.add_parser("serve", help="Run the health endpoint")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=int(os.environ.get("PORT", "3000")))

    return parser


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, default=str))


def _require_pos(pos_config: PosConfig | None) -> PosConfig:
    if pos_config is None:
        raise SystemExit("Lightspeed is not configured (set LIGHTSPEED_* or --config-dir).")
    return pos_config


def dispatch_chat(assistant: Assistant, text: str) -> str | None:
    """Route one chat message to the matching event handler."""
    message = text.strip()
    if message.startswith("/"):
        command, _, rest = message.partition(" ")
        return handle_command(assistant, command, rest)
    if MENTION_RE.search(message):
        return handle_mention(assistant, message)
    return handle_direct_message(assistant, {"channel_type": "im", "text": message})


def _run_sales_command(args: argparse.Namespace, config: PosConfig) -> None:
    client = LightspeedClient(config)

    if args.command == "metrics":
        window = date_window(args.days_ago, args.days, config.timezone)
        metrics = SalesAggregator(client, config).metrics(window)
        if args.json:
            _print_json(asdict(metrics))
        else:
            title = f"PERFORMANCE, {period_title(args.days_ago, args.days, window.label)}"
            print(format_today_block(metrics, title=title))
            print()
            print(format_channel_block(metrics))

    elif args.command == "compare":
        result = Comparator(client, config).compare(args.period)
        if args.json:
            _print_json(asdict(result))
        else:
            print(format_comparison_block(result))

    elif args.command == "top":
        window = date_window(args.days_ago, args.days, config.timezone)
        products = TopProductsRanker(client, config).top(window, limit=args.limit)
        if args.json:
            _print_json([asdict(p) for p in products])
        else:
            period = period_title(args.days_ago, args.days, window.label)
            print(format_top_products_block(products, limit=args.limit, period=period))

    elif args.command == "search":
        matches = SalesSearch(client, config).search(args.term, days_span=args.days)
        print(f"{len(matches)} sale(s) matching {args.term!r}")
        for sale in matches:
            who = sale.customer.full_name if sale.customer else "walk-in"
            when = sale.completed_at.isoformat() if sale.completed_at else "n/a"
            print(f"• #{sale.sale_id} {when} {who}: ${sale.total:,.2f}")

    elif args.command == "lookup":
        if args.kind == "items":
            for item in client.find_items(args.text, limit=args.limit):
                print(f"• #{item.get('itemID')} {item.get('description') or 'Unknown'}")
        else:
            for customer in client.find_customers(args.text, limit=args.limit):
                print(f"• #{customer.customer_id} {customer.full_name}")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        import uvicorn

        from pos_insights.health import create_app

        logger.info("Health check server running on port %d", args.port)
        uvicorn.run(create_app(), host=args.host, port=args.port)
        return 0

    pos_config = load_pos_config(args.config_dir)

    try:
        if args.command in ("ask", "chat", "data", "sales"):
            assistant = Assistant(AssistantConfig.from_env(), pos_config)
            if args.command == "ask":
                print(assistant.answer(args.text, include_context=args.context))
            elif args.command == "chat":
                reply = dispatch_chat(assistant, args.text)
                if reply is not None:
                    print(reply)
            elif args.command == "data":
                print(assistant.data_block(args.text))
            else:
                print(assistant.sales_summary())
        else:
            _run_sales_command(args, _require_pos(pos_config))
    except InsightsError as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
