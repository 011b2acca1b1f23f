"""
Page Capture Module

Renders a page in a headless browser and stores one immutable snapshot
(rendered HTML, readable text, metadata) in the archive:

1. Validate the URL (no side effects on failure)
2. Resolve a collision-free identifier
3. Navigate with a bounded timeout; reject failed or non-2xx/3xx responses
4. Best-effort settle (network idle, then a fixed delay)
5. Extract markup, text and user agent
6. Persist the snapshot directory
"""

from __future__ import annotations

import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .errors import CaptureError, NonFatalWarning
from .text_extractor import TextExtractor
from pagevault.utils.file_manager import SnapshotStore
from pagevault.utils.identifiers import get_timestamp
from pagevault.utils.validators import require_capture_url


DEFAULT_ARCHIVE_ROOT = Path("archive")

DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
    "headless": True,
    "args": ["--no-sandbox", "--disable-dev-shm-usage"],
}

USER_AGENT_SCRIPT = "() => navigator.userAgent"


@dataclass
class CaptureOptions:
    archive_root: Path = DEFAULT_ARCHIVE_ROOT
    timestamp: Optional[str] = None  # identifier base override
    network_idle_timeout_ms: int = 10000  # 0 = skip the network idle wait
    additional_wait_ms: int = 1500  # 0 = no trailing delay
    navigation_timeout_ms: int = 60000
    wait_until: str = "domcontentloaded"
    logger: Optional[logging.Logger] = None
    on_page_ready: Optional[Callable[[Any], None]] = None
    browser_launcher: Any = None  # anything with launch(**kwargs); Playwright Chromium if None
    browser_launch_options: Dict[str, Any] = field(default_factory=dict)
    run_id: Optional[str] = None


@dataclass
class SnapshotResult:
    snapshot_dir: Path
    timestamp: str
    url: str
    html_path: Path
    text_path: Path
    meta_path: Path
    status: int
    warnings: List[NonFatalWarning] = field(default_factory=list)


@contextmanager
def browser_session(launcher: Any = None,
                    launch_options: Optional[Dict[str, Any]] = None) -> Iterator[Any]:
    """
    Launch a browser and guarantee it is closed on every exit path.

    Args:
        launcher: Object exposing ``launch(**kwargs)``; Playwright's Chromium when None
        launch_options: Overrides merged over the default launch options

    Yields:
        The launched browser

    Raises:
        CaptureError: If the browser cannot be launched
    """
    options = {**DEFAULT_LAUNCH_OPTIONS, **(launch_options or {})}

    with ExitStack() as stack:
        try:
            if launcher is None:
                playwright = stack.enter_context(sync_playwright())
                launcher = playwright.chromium
            browser = launcher.launch(**options)
        except PlaywrightError as e:
            raise CaptureError(f"Browser launch failed: {e}") from e

        stack.callback(browser.close)
        yield browser


def wait_for_page_settled(page: Any,
                          network_idle_timeout_ms: int = 10000,
                          additional_wait_ms: int = 1500,
                          logger: Optional[logging.Logger] = None) -> List[NonFatalWarning]:
    """
    Give late-rendering content a chance to appear.

    Waiting for network idle is best effort: a timeout is logged and returned
    as a warning instead of raised.

    Returns:
        Warnings raised while settling
    """
    logger = logger or logging.getLogger(__name__)
    warnings: List[NonFatalWarning] = []

    if network_idle_timeout_ms and network_idle_timeout_ms > 0:
        try:
            page.wait_for_load_state("networkidle", timeout=network_idle_timeout_ms)
        except PlaywrightError as e:
            warning = NonFatalWarning(f"Continuing without network idle: {e}")
            logger.warning(str(warning))
            warnings.append(warning)

    if additional_wait_ms and additional_wait_ms > 0:
        page.wait_for_timeout(additional_wait_ms)

    return warnings


def take_snapshot(target_url: str, options: Optional[CaptureOptions] = None) -> SnapshotResult:
    """
    Capture one snapshot of ``target_url`` into the archive.

    Args:
        target_url: Absolute http(s) URL to capture
        options: Capture configuration

    Returns:
        SnapshotResult describing the written snapshot

    Raises:
        InvalidInputError: If the URL is not an absolute http(s) URL
        CaptureError: If the browser or navigation fails
    """
    options = options or CaptureOptions()
    logger = options.logger or logging.getLogger(__name__)

    require_capture_url(target_url)

    store = SnapshotStore(options.archive_root)
    timestamp_base = get_timestamp(options.timestamp)
    snapshot_dir_name, snapshot_dir_path = store.ensure_unique_dir(timestamp_base)

    logger.info(f"Capturing {target_url} as {snapshot_dir_name}")

    with browser_session(options.browser_launcher, options.browser_launch_options) as browser:
        try:
            context = browser.new_context()
            page = context.new_page()
            if options.on_page_ready is not None:
                options.on_page_ready(page)
        except PlaywrightError as e:
            raise CaptureError(f"Page setup failed: {e}") from e

        try:
            response = page.goto(
                target_url,
                wait_until=options.wait_until,
                timeout=options.navigation_timeout_ms,
            )
        except PlaywrightError as e:
            raise CaptureError(f"Navigation failed: {e}") from e

        if response is None:
            raise CaptureError("Navigation failed: no response received.")

        status = response.status
        if status < 200 or status >= 400:
            raise CaptureError(f"Navigation failed: received HTTP status {status}.")

        warnings = wait_for_page_settled(
            page,
            network_idle_timeout_ms=options.network_idle_timeout_ms,
            additional_wait_ms=options.additional_wait_ms,
            logger=logger,
        )

        try:
            html = page.content()
            user_agent = page.evaluate(USER_AGENT_SCRIPT)
        except PlaywrightError as e:
            raise CaptureError(f"Content extraction failed: {e}") from e

    text = TextExtractor().extract_text(html, target_url)

    metadata = {
        "url": target_url,
        "timestamp": snapshot_dir_name,
        "status": status,
        "userAgent": user_agent,
        "githubRunId": options.run_id,
    }
    paths = store.write_snapshot(snapshot_dir_path, html, text, metadata)

    return SnapshotResult(
        snapshot_dir=snapshot_dir_path,
        timestamp=snapshot_dir_name,
        url=target_url,
        html_path=paths['html'],
        text_path=paths['text'],
        meta_path=paths['meta'],
        status=status,
        warnings=warnings,
    )
