"""Domain-specific exceptions for POS Insights.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from InsightsError for easy catching.
"""


class InsightsError(Exception):
    """Base exception for all POS Insights errors.

    Users can catch this exception to handle any error raised while
    fetching, aggregating or narrating sales data.
    """

    pass


class ConfigurationError(InsightsError):
    """Raised when required configuration is missing or invalid.

    This exception is raised when:
    - POS credentials or account/shop IDs are absent
    - The language-model API key is absent
    - A configuration file cannot be loaded or parsed
    """

    pass


class UpstreamError(InsightsError):
    """Raised when an upstream API call fails.

    This exception is raised when:
    - The POS or language-model API is unreachable or times out
    - The API answers with a non-2xx status code
    """

    pass


class ParseError(InsightsError):
    """Raised when an upstream response has an unexpected shape.

    Record-level oddities are normalized defensively; this is only raised
    when a whole response body cannot be interpreted.
    """

    pass
