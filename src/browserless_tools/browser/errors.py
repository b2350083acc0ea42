"""Exceptions raised by the browser layer.

Only session establishment errors are meant to leave the toolkit; everything
else is caught at the tool boundary and turned into an ``ActionResult``.
"""


class BrowserlessError(Exception):
    """Base class for Browserless session and interaction failures."""


class BrowserlessConnectionError(BrowserlessError):
    """Raised when the token is missing or the CDP handshake fails."""


class LiveURLUnavailableError(BrowserlessError):
    """Raised when Browserless does not hand out a live session URL."""


class ElementNotActionableError(BrowserlessError):
    """Raised when every interaction strategy failed for a selector.

    Covers both "not found" and "found but not actionable": the strategies
    cannot reliably tell the two apart over CDP.
    """

    def __init__(self, selector: str, errors: list[dict[str, str]]):
        """
        Args:
            selector: CSS selector that was targeted
            errors: One dict per failed strategy with 'strategy' and 'error' keys
        """
        self.selector = selector
        self.errors = errors
        message = "; ".join(f"{e['strategy']}: {e['error']}" for e in errors)
        super().__init__(message or "unknown")

    @property
    def strategies_tried(self) -> list[str]:
        return [e["strategy"] for e in self.errors]
