"""
Headless Browser Driver - Render share pages using Playwright.

Handles:
- Stealth adjustments applied before navigation (webdriver flag, plugins,
  languages, chrome runtime)
- Per-platform navigation profiles (user agent, wait condition, settle delay)
- A single fallback navigation with a looser wait condition
- Optional wait for a platform selector (missing selector is not fatal)
- Guaranteed release of page and browser on every exit path

Each render launches its own browser; no instance is shared between calls.

Requires: playwright package and browser binaries
Install with: pip install playwright && playwright install chromium
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

from .config import config

logger = logging.getLogger(__name__)

# Playwright is optional - only import if available
try:
    from playwright.async_api import (
        async_playwright,
        Error as PlaywrightError,
        TimeoutError as PlaywrightTimeout,
    )
    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    PLAYWRIGHT_AVAILABLE = False
    logger.info("Playwright not installed - browser extraction disabled")


DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_6 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/16.6 Mobile/15E148 Safari/604.1"
)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    # Stealth args to avoid detection
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
    "--disable-background-timer-throttling",
    "--disable-renderer-backgrounding",
]

EXTRA_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
}

STEALTH_SCRIPT = """
    // Override navigator.webdriver
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined
    });

    // Override navigator.plugins to look like a real browser
    Object.defineProperty(navigator, 'plugins', {
        get: () => [
            { name: 'Chrome PDF Plugin', filename: 'internal-pdf-viewer' },
            { name: 'Chrome PDF Viewer', filename: 'mhjfbmdgcfjbbpaeojofohoefgiehjai' },
            { name: 'Native Client', filename: 'internal-nacl-plugin' }
        ]
    });

    // Override navigator.languages
    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en']
    });

    // Hide automation-related Chrome properties
    window.chrome = {
        runtime: {},
        loadTimes: function() {},
        csi: function() {},
        app: {}
    };
"""

# Tracking/analytics requests that never carry conversation content
BLOCKED_DOMAINS = [
    "google-analytics.com",
    "googletagmanager.com",
    "doubleclick.net",
    "googlesyndication.com",
    "facebook.net",
    "segment.io",
    "sentry.io",
]

BLOCKED_EXTENSIONS = [".woff", ".woff2", ".ttf", ".otf"]

FALLBACK_WAIT_UNTIL = "load"


@dataclass(frozen=True)
class NavigationProfile:
    """How to load a page: user agent, wait condition and settle delay."""
    user_agent: str = DESKTOP_USER_AGENT
    wait_until: str = "networkidle"  # Playwright: load, domcontentloaded, networkidle, commit
    settle_ms: int = 0  # extra wait for client-side rendering after navigation
    is_mobile: bool = False


DEFAULT_PROFILE = NavigationProfile()

# Host -> profile. Gemini renders share pages more reliably for a mobile
# client and rarely reaches network idle.
NAVIGATION_PROFILES: dict[str, NavigationProfile] = {
    "gemini.google.com": NavigationProfile(
        user_agent=MOBILE_USER_AGENT,
        wait_until="domcontentloaded",
        settle_ms=3000,
        is_mobile=True,
    ),
    "g.co": NavigationProfile(
        user_agent=MOBILE_USER_AGENT,
        wait_until="domcontentloaded",
        settle_ms=3000,
        is_mobile=True,
    ),
}


def navigation_profile_for(url: str) -> NavigationProfile:
    """Pick the navigation profile for a URL's host."""
    host = (urlparse(url).hostname or "").lower()
    return NAVIGATION_PROFILES.get(host, DEFAULT_PROFILE)


@dataclass
class RenderedPage:
    """Snapshot of a rendered page."""
    url: str
    final_url: str
    html: str
    title: str
    selector_found: bool


class BrowserError(Exception):
    """Raised when the browser cannot load a page."""
    pass


class BrowserDriver:
    """
    Renders share pages in an isolated headless Chromium.

    Every call to render() launches and closes its own browser, so concurrent
    extractions never share pages or processes.
    """

    def __init__(
        self,
        timeout: int | None = None,
        headless: bool | None = None,
        executable_path: str | None = None,
    ):
        """
        Initialize the driver.

        Args:
            timeout: Navigation and selector timeout in milliseconds
            headless: Run Chromium headless
            executable_path: System browser binary; bundled Chromium if None
        """
        self.timeout = config.BROWSER_TIMEOUT if timeout is None else timeout
        self.headless = config.BROWSER_HEADLESS if headless is None else headless
        self.executable_path = executable_path or config.BROWSER_EXECUTABLE_PATH

    @property
    def is_available(self) -> bool:
        """Check if Playwright is installed and available."""
        return PLAYWRIGHT_AVAILABLE

    async def render(self, url: str, wait_for_selector: str | None = None) -> RenderedPage:
        """
        Navigate to a page and return its rendered HTML.

        Args:
            url: Page to load
            wait_for_selector: CSS selector signalling that content rendered

        Returns:
            RenderedPage with HTML and title

        Raises:
            BrowserError: If Playwright is unavailable or navigation fails
        """
        if not PLAYWRIGHT_AVAILABLE:
            raise BrowserError("Playwright is not installed. Run: pip install playwright && playwright install chromium")

        profile = navigation_profile_for(url)

        async with async_playwright() as playwright:
            browser = None
            page: Optional[Any] = None
            try:
                browser = await playwright.chromium.launch(
                    headless=self.headless,
                    executable_path=self.executable_path,
                    args=LAUNCH_ARGS,
                )
                context = await browser.new_context(
                    user_agent=profile.user_agent,
                    is_mobile=profile.is_mobile,
                    locale="en-US",
                    java_script_enabled=True,
                    extra_http_headers=EXTRA_HEADERS,
                )
                page = await context.new_page()

                # Stealth adjustments must be in place before any navigation
                await page.add_init_script(STEALTH_SCRIPT)
                await page.route("**/*", self._filter_requests)

                await self._navigate(page, url, profile)

                selector_found = True
                if wait_for_selector:
                    selector_found = await self._wait_for_content(page, url, wait_for_selector)

                if profile.settle_ms:
                    await page.wait_for_timeout(profile.settle_ms)

                html = await page.content()
                title = await page.title()
                logger.info(f"Rendered {url} (title: {title!r})")

                return RenderedPage(
                    url=url,
                    final_url=page.url,
                    html=html,
                    title=title,
                    selector_found=selector_found,
                )
            except PlaywrightTimeout as e:
                raise BrowserError(f"Page load timeout after {self.timeout}ms") from e
            except PlaywrightError as e:
                raise BrowserError(str(e)) from e
            finally:
                await self._close_quietly(page, "page")
                await self._close_quietly(browser, "browser")

    async def _navigate(self, page: Any, url: str, profile: NavigationProfile) -> None:
        """Navigate with the profile's wait condition, falling back once."""
        logger.info(f"Navigating to {url} (wait_until={profile.wait_until}, timeout={self.timeout}ms)")
        try:
            await page.goto(url, wait_until=profile.wait_until, timeout=self.timeout)
        except Exception as e:
            if profile.wait_until == FALLBACK_WAIT_UNTIL:
                raise
            logger.warning(f"Navigation to {url} failed ({e}), retrying with wait_until={FALLBACK_WAIT_UNTIL}")
            await page.goto(url, wait_until=FALLBACK_WAIT_UNTIL, timeout=self.timeout)

    async def _wait_for_content(self, page: Any, url: str, selector: str) -> bool:
        """Wait for a content selector; absence is logged, not raised."""
        try:
            await page.wait_for_selector(selector, timeout=self.timeout)
            return True
        except PlaywrightTimeout:
            logger.warning(f"Selector {selector!r} did not appear on {url}, extracting anyway")
            return False

    async def _filter_requests(self, route: Any) -> None:
        """Abort tracking and font requests."""
        request_url = route.request.url
        if any(domain in request_url for domain in BLOCKED_DOMAINS):
            await route.abort()
            return
        if any(ext in request_url for ext in BLOCKED_EXTENSIONS):
            await route.abort()
            return
        await route.continue_()

    async def _close_quietly(self, resource: Any, label: str) -> None:
        """Close a page or browser, suppressing cleanup errors."""
        if resource is None:
            return
        try:
            await resource.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing {label}: {e}")
