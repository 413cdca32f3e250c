from __future__ import annotations


class InvalidArgumentError(ValueError):
    """Raised when a chart is configured with arguments that break its contract."""
