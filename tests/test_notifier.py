"""
Unit Tests — Notifier, Browser and Logging
===========================================
Desktop notifications are best effort; opening a browser is not.
"""
import logging
from unittest.mock import patch

import pytest

from ghactions.services.browser import BrowserError, open_url
from ghactions.services.notifier import DesktopNotifier
from ghactions.utils.logging_config import ColoredFormatter, setup_logging


@patch("ghactions.services.notifier.notification")
def test_notify_sends_title_and_message(mock_notification):
    notifier = DesktopNotifier("widgets")
    assert notifier.notify("main build complete!") is True
    kwargs = mock_notification.notify.call_args.kwargs
    assert kwargs["title"] == "github-actions (widgets)"
    assert kwargs["message"] == "main build complete!"


@patch("ghactions.services.notifier.notification")
def test_notify_failure_is_logged_not_raised(mock_notification, caplog):
    mock_notification.notify.side_effect = NotImplementedError("No usable implementation found!")
    with caplog.at_level(logging.WARNING, logger="ghactions.services.notifier"):
        assert DesktopNotifier("widgets").notify("build failed") is False
    assert "Desktop notification failed" in caplog.text


@patch("ghactions.services.browser.webbrowser.open", return_value=True)
def test_open_url(mock_open):
    open_url("https://github.com/octo/widgets/actions/runs/1")
    mock_open.assert_called_once_with("https://github.com/octo/widgets/actions/runs/1")


@patch("ghactions.services.browser.webbrowser.open", return_value=False)
def test_open_url_without_browser(mock_open):
    with pytest.raises(BrowserError):
        open_url("https://github.com/octo/widgets/actions/runs/1")


class TestLogging:

    def setup_method(self):
        self.root = logging.getLogger()
        self.saved = (self.root.handlers[:], self.root.level)

    def teardown_method(self):
        handlers, level = self.saved
        for handler in self.root.handlers[:]:
            self.root.removeHandler(handler)
            handler.close()
        for handler in handlers:
            self.root.addHandler(handler)
        self.root.setLevel(level)

    def test_plain_console_handler(self):
        setup_logging(logging.DEBUG, colored=False)
        handlers = self.root.handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0].formatter, ColoredFormatter)
        assert logging.getLogger("ghactions").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "ghactions.log"
        setup_logging(logging.INFO, log_file=str(log_file), colored=True)
        assert isinstance(self.root.handlers[0].formatter, ColoredFormatter)
        logging.getLogger("ghactions.test").info("hello from the monitor")
        for handler in self.root.handlers:
            handler.flush()
        assert "hello from the monitor" in log_file.read_text()
