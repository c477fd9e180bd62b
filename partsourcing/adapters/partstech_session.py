"""
PartsTech Session Manager

Owns the only browser in the process. The browser is used for exactly one
thing: logging in to PartsTech and reading back the session cookies. Every
search afterwards goes over the GraphQL API with those cookies.

The cached session is shared by all requests. Refreshes are serialised behind
a lock, so concurrent requests that all see an expired session trigger a
single login handshake.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from partsourcing.core.config import settings
from partsourcing.core.errors import AuthFailedError
from partsourcing.utils.scraper_utils import (
    USER_AGENT,
    apply_stealth,
    dismiss_dialogs,
    launch_browser,
    take_debug_screenshot,
)

logger = logging.getLogger(__name__)

# At least one of these must be set after a successful login
REQUIRED_COOKIES = ("sid-prod", "pt-session-id")

EMAIL_SELECTOR = 'input[type="email"], input[name="email"], input[name="username"]'
PASSWORD_SELECTOR = 'input[type="password"]'
SUBMIT_SELECTOR = 'button[type="submit"]'


@dataclass
class MarketplaceSession:
    cookies: List[Dict] = field(default_factory=list)
    cookie_string: str = ""
    expires_at: float = 0.0

    def is_valid(self, now: float) -> bool:
        return bool(self.cookie_string) and now < self.expires_at


def build_cookie_string(cookies: List[Dict]) -> str:
    return "; ".join(f"{c['name']}={c['value']}" for c in cookies)


def has_required_cookies(cookies: List[Dict]) -> bool:
    names = {c.get("name") for c in cookies}
    return any(name in names for name in REQUIRED_COOKIES)


class PartsTechSessionManager:
    """Acquires, caches and invalidates the PartsTech session"""

    def __init__(
        self,
        username: str,
        password: str,
        login_url: str = "https://app.partstech.com/login",
        ttl_seconds: float = 24 * 60 * 60,
        headless: bool = True,
        stealth: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        self.username = username
        self.password = password
        self.login_url = login_url
        self.ttl_seconds = ttl_seconds
        self.headless = headless
        self.stealth = stealth
        self._clock = clock

        self._session: Optional[MarketplaceSession] = None
        self._refresh_lock = asyncio.Lock()

        self._playwright = None
        self._browser = None
        self._context = None

    @classmethod
    def from_settings(cls) -> "PartsTechSessionManager":
        return cls(
            username=settings.PARTSTECH_USERNAME,
            password=settings.PARTSTECH_PASSWORD,
            login_url=settings.PARTSTECH_LOGIN_URL,
            ttl_seconds=settings.PARTSTECH_SESSION_TTL_HOURS * 60 * 60,
            headless=settings.PARTSTECH_HEADLESS,
            stealth=settings.PARTSTECH_STEALTH,
        )

    @property
    def is_active(self) -> bool:
        return self._session is not None and self._session.is_valid(self._clock())

    @property
    def expires_at(self) -> Optional[datetime]:
        if not self.is_active:
            return None
        return datetime.fromtimestamp(self._session.expires_at, tz=timezone.utc)

    async def ensure_session(self) -> str:
        """
        Return a valid cookie string, logging in only when needed.

        Raises:
            AuthFailedError: If the login handshake does not yield session cookies
        """
        session = self._session
        if session is not None and session.is_valid(self._clock()):
            logger.debug("PARTSTECH SESSION: Reusing cached session")
            return session.cookie_string

        async with self._refresh_lock:
            # Another request may have refreshed while we waited
            session = self._session
            if session is not None and session.is_valid(self._clock()):
                return session.cookie_string

            logger.info("PARTSTECH SESSION: Session expired or not found, logging in...")
            cookies = await self._perform_login()

            # Validity is counted from acquisition time
            self._session = MarketplaceSession(
                cookies=cookies,
                cookie_string=build_cookie_string(cookies),
                expires_at=self._clock() + self.ttl_seconds,
            )
            return self._session.cookie_string

    def invalidate(self):
        """Drop the cached session; the next ensure_session() logs in again"""
        if self._session is not None:
            logger.info("PARTSTECH SESSION: Cached session invalidated")
        self._session = None

    async def cleanup(self):
        """Release the browser. Safe to call more than once."""
        self._session = None
        browser, playwright = self._browser, self._playwright
        self._browser = self._context = self._playwright = None

        if browser is not None:
            logger.info("PARTSTECH SESSION: Closing browser...")
            try:
                await browser.close()
            finally:
                if playwright is not None:
                    await playwright.stop()
            logger.info("PARTSTECH SESSION: Browser closed")

    async def _ensure_browser(self):
        if self._browser is None:
            self._playwright, self._browser = await launch_browser(headless=self.headless)
        return self._browser

    async def _perform_login(self) -> List[Dict]:
        """
        Log in through the browser and return the context cookies.

        Raises:
            AuthFailedError: Missing credentials, browser failure, or no session cookies
        """
        if not self.username or not self.password:
            raise AuthFailedError("PartsTech credentials not configured in environment")

        try:
            browser = await self._ensure_browser()

            if self._context is not None:
                await self._context.close()
            self._context = await browser.new_context(
                viewport={'width': 1920, 'height': 1080},
                user_agent=USER_AGENT,
            )
            page = await self._context.new_page()
            if self.stealth:
                await apply_stealth(page)

            await page.goto(self.login_url, wait_until="networkidle", timeout=30000)
            await page.wait_for_timeout(2000)

            await page.fill(EMAIL_SELECTOR, self.username)
            await page.fill(PASSWORD_SELECTOR, self.password)
            await page.click(SUBMIT_SELECTOR)
            await page.wait_for_timeout(5000)

            await dismiss_dialogs(page)

            cookies = await self._context.cookies()
        except Exception as e:
            raise AuthFailedError(f"Login error: {e}") from e

        if not has_required_cookies(cookies):
            await take_debug_screenshot(page, "partstech_login_fail")
            raise AuthFailedError("Login failed - essential cookies not found")

        logger.info("PARTSTECH SESSION: Login successful - session cookies obtained")
        return cookies
