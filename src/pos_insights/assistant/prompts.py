"""Prompt text for the language model."""

from __future__ import annotations

from datetime import datetime

# Vocabulary that marks a message as a question about the business
BUSINESS_KEYWORDS = (
    "sales",
    "revenue",
    "profit",
    "transaction",
    "customer",
    "product",
    "selling",
    "today",
    "yesterday",
    "week",
    "month",
    "performance",
    "channel",
    "delivery",
    "ubereats",
    "doordash",
    "compare",
    "top",
    "best",
    "worst",
    "average",
    "total",
    "margin",
    "cost",
    "price",
)

SEPARATOR = "━" * 38

UNAVAILABLE_NOTE = "(Note: Live sales data is unavailable - Lightspeed is not configured.)"


def is_business_query(message: str) -> bool:
    """Check whether a message mentions any business keyword."""
    text = message.casefold()
    return any(keyword in text for keyword in BUSINESS_KEYWORDS)


def build_system_prompt(business_name: str, now: datetime) -> str:
    """Static business context plus the current business-local time."""
    return f"""You are Claude, an AI assistant integrated into Slack for {business_name}.

You have access to real-time business data from Lightspeed POS and can help with:
- Sales analysis and reporting (today, yesterday, this week, any date range)
- Product performance (top sellers, revenue by product)
- Customer insights and purchase patterns
- Channel analysis (In-Store vs UberEats, DoorDash, etc.)
- Profit margins and business metrics
- Comparative analysis (today vs yesterday, this week vs last week)
- Business intelligence queries

Current date/time: {now.strftime("%m/%d/%Y, %I:%M:%S %p")}

When users ask about sales, products, customers, or any business metrics, you'll receive the relevant data.
Provide clear, actionable insights from the data.
Be concise in Slack - use bullet points and short paragraphs.
Use emojis appropriately to make responses engaging.

You can answer questions like:
- "How are sales doing today?"
- "What are my top selling products this week?"
- "Compare today to yesterday"
- "Show me all sales for [product name]"
- "What's my profit margin today?"
- "Which delivery channel is performing best?\""""


def build_user_prompt(data_block: str, question: str) -> str:
    """Prefix the user's question with the live data block."""
    return (
        f"LIVE BUSINESS DATA:\n{data_block}\n\n{SEPARATOR}\n\n"
        f'USER QUESTION: "{question}"\n\n'
        "Please analyze the data above and answer the user's question. "
        "Provide insights, trends, and actionable recommendations based on the data. "
        "Be conversational and helpful."
    )


def with_note(question: str, note: str) -> str:
    """Append a parenthesized note to the user's question."""
    return f"{question}\n\n{note}"
