"""Opens a workflow run page in the user's browser."""
import logging
import webbrowser

logger = logging.getLogger(__name__)


class BrowserError(RuntimeError):
    """No browser could be launched for the URL."""


def open_url(url: str) -> None:
    logger.debug("Opening %s", url)
    if not webbrowser.open(url):
        raise BrowserError(f"Could not open a browser for {url}")
