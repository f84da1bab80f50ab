from __future__ import annotations

import logging
import webbrowser

from domain.gateways import Navigator


logger = logging.getLogger(__name__)


class BrowserNavigator(Navigator):
    """
    User agent for a desktop process: wallet pages open in the system browser.

    The wallet sends the user back to `location` with its answer in the
    query string; the console feeds that URL back in with `arrive`.
    """

    def __init__(self, location: str, open_browser: bool = True) -> None:
        self.location = location
        self._open_browser = open_browser

    def assign(self, url: str) -> None:
        self.location = url
        if self._open_browser:
            webbrowser.open(url)
        else:
            logger.info("open %s to continue", url)

    def replace(self, url: str) -> None:
        self.location = url

    def arrive(self, url: str) -> None:
        """Record that the user agent has landed on `url`."""

        self.location = url
