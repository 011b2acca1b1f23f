"""
Shared fixtures: an in-process stand-in for the Playwright sync API and
logging cleanup between tests.
"""

import logging

import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from pagevault.core.logger import shutdown_logging


DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) HeadlessChrome/120.0.0.0"


class FakeResponse:
    def __init__(self, status):
        self.status = status


class FakePage:
    def __init__(self, site):
        self.site = site
        self.visited = []
        self.waited_ms = []
        self.load_states = []

    def goto(self, url, wait_until=None, timeout=None):
        self.visited.append((url, wait_until, timeout))
        if self.site.navigation_error is not None:
            raise self.site.navigation_error
        if self.site.status is None:
            return None
        return FakeResponse(self.site.status)

    def wait_for_load_state(self, state, timeout=None):
        self.load_states.append((state, timeout))
        if state == "networkidle" and self.site.never_idle:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    def wait_for_timeout(self, ms):
        self.waited_ms.append(ms)

    def content(self):
        return self.site.html

    def evaluate(self, script):
        assert "navigator.userAgent" in script
        return self.site.user_agent


class FakeContext:
    def __init__(self, site):
        self.site = site
        self.pages = []

    def new_page(self):
        page = FakePage(self.site)
        self.pages.append(page)
        return page


class FakeBrowser:
    def __init__(self, site):
        self.site = site
        self.closed = False
        self.contexts = []

    def new_context(self, **kwargs):
        if self.site.context_error is not None:
            raise self.site.context_error
        context = FakeContext(self.site)
        self.contexts.append(context)
        return context

    def close(self):
        self.closed = True


class FakeLauncher:
    """Serves a canned page; configure the attributes before capturing."""

    def __init__(self, html="<html><body><p>Hello</p></body></html>"):
        self.html = html
        self.status = 200
        self.user_agent = DEFAULT_USER_AGENT
        self.navigation_error = None
        self.context_error = None
        self.never_idle = False
        self.launches = []
        self.browsers = []

    def launch(self, **kwargs):
        self.launches.append(kwargs)
        browser = FakeBrowser(self)
        self.browsers.append(browser)
        return browser

    @property
    def last_page(self):
        return self.browsers[-1].contexts[-1].pages[-1]


@pytest.fixture
def fake_launcher():
    return FakeLauncher()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    shutdown_logging()
    logging.getLogger("pagevault").setLevel(logging.NOTSET)
