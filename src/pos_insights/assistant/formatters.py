"""Plain-text blocks for chat replies and language-model prompts.

These functions accept computed results and return strings. They do NOT
fetch data or touch the network.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pos_insights.sales.compare import ComparisonResult
    from pos_insights.sales.metrics import SalesMetrics
    from pos_insights.sales.ranking import ProductRanking

COMPARISON_TITLES = {
    "daily": "YESTERDAY",
    "weekly": "LAST WEEK",
    "monthly": "PREVIOUS 30 DAYS",
}


def _signed(value: float, fmt: str = ".1f") -> str:
    return f"{'+' if value > 0 else ''}{value:{fmt}}"


def format_clock(now: datetime) -> str:
    """Format a time of day like '03:05 PM'."""
    return now.strftime("%I:%M %p")


def format_today_block(
    metrics: SalesMetrics,
    now: datetime | None = None,
    title: str = "TODAY'S PERFORMANCE",
) -> str:
    """Headline figures for today's (or another window's) sales."""
    title = f"📊 {title}"
    if now is not None:
        title += f" (as of {format_clock(now)})"
    lines = [
        f"{title}:",
        f"• Revenue: ${metrics.total_revenue:,.2f}",
        f"• Transactions: {metrics.transaction_count}",
        f"• Average Sale: ${metrics.avg_sale:,.2f}",
        f"• Profit: ${metrics.profit:,.2f} ({metrics.profit_margin:.1f}% margin)",
        f"• Items Sold: {metrics.total_items:.0f}",
        f"• Avg Items/Sale: {metrics.avg_items:.1f}",
        f"• Peak Sales Hour: {metrics.peak_hour}:00",
    ]
    return "\n".join(lines)


def period_title(days_ago: int, days_span: int, label: str) -> str:
    """Short title for a window, e.g. "TODAY", "LAST 7 DAYS".

    Examples:
        >>> period_title(0, 7, "2024-06-28")
        'LAST 7 DAYS'
        >>> period_title(3, 2, "2024-07-01")
        '2 DAYS FROM 2024-07-01'

    """
    if days_ago == 0:
        return "TODAY" if days_span == 1 else f"LAST {days_span} DAYS"
    if days_ago == 1 and days_span == 1:
        return "YESTERDAY"
    unit = "DAY" if days_span == 1 else "DAYS"
    return f"{days_span} {unit} FROM {label}"


def format_week_block(metrics: SalesMetrics) -> str:
    """Headline figures for the last seven days."""
    lines = [
        "📅 THIS WEEK:",
        f"• Revenue: ${metrics.total_revenue:,.2f}",
        f"• Transactions: {metrics.transaction_count}",
        f"• Profit: ${metrics.profit:,.2f}",
    ]
    return "\n".join(lines)


def format_channel_block(metrics: SalesMetrics) -> str:
    """Orders per channel, busiest first, with their share of transactions."""
    lines = ["🚚 CHANNEL BREAKDOWN:"]
    if not metrics.channels:
        lines.append("• No orders yet")
        return "\n".join(lines)

    ranked = sorted(metrics.channels.items(), key=lambda kv: kv[1], reverse=True)
    for channel, count in ranked:
        share = count / metrics.transaction_count * 100 if metrics.transaction_count else 0.0
        lines.append(f"• {channel}: {count} orders ({share:.1f}%)")
    return "\n".join(lines)


def format_comparison_block(result: ComparisonResult) -> str:
    """Deltas between the current and previous window."""
    title = COMPARISON_TITLES.get(result.period, result.period.upper())
    deltas = result.deltas
    lines = [
        f"📈 COMPARED TO {title}:",
        f"• Revenue Change: {_signed(deltas.revenue_pct)}%",
        f"• Transaction Change: {_signed(deltas.transactions_pct)}%",
        f"• Avg Sale Change: ${_signed(deltas.avg_sale_abs, ',.2f')}",
    ]
    return "\n".join(lines)


def format_top_products_block(
    products: Sequence[ProductRanking],
    limit: int = 5,
    period: str = "TODAY",
) -> str:
    """Numbered list of the best-selling items.

    Args:
        products: Ranked items, best first.
        limit: Maximum number of items listed.
        period: Title suffix naming the window, e.g. "TODAY" or "LAST 7 DAYS".

    """
    lines = [f"🏆 TOP SELLING PRODUCTS {period}:"]
    if not products:
        lines.append("• No sales yet")
        return "\n".join(lines)

    for rank, p in enumerate(products[:limit], start=1):
        lines.append(f"{rank}. {p.description}: ${p.revenue:,.2f} revenue ({p.quantity:g} units)")
    return "\n".join(lines)


def format_sales_summary(metrics: SalesMetrics, now: datetime) -> str:
    """Short summary used by the /sales command."""
    lines = [
        f"📊 Today's Sales (as of {format_clock(now)}):",
        f"• Transactions: {metrics.transaction_count}",
        f"• Revenue: ${metrics.total_revenue:,.2f}",
        f"• Avg Sale: ${metrics.avg_sale:,.2f}",
        f"• Profit: ${metrics.profit:,.2f} ({metrics.profit_margin:.1f}% margin)",
        f"• Items Sold: {metrics.total_items:.0f}",
        f"• Peak Hour: {metrics.peak_hour}:00",
    ]
    return "\n".join(lines)
