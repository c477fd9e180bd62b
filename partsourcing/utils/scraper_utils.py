"""
Scraper Utility Module

Browser helpers for the marketplace login handshake:
- Browser launch (plain or stealth-patched)
- Best-effort UI actions (dialog dismissal)
- Debug screenshots
"""

import logging
from typing import Awaitable, Callable, Iterable, List, Sequence, Tuple
from playwright.async_api import async_playwright, Browser, Page, Playwright

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

BROWSER_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-blink-features=AutomationControlled',
    '--disable-dev-shm-usage',
]

# Interstitials PartsTech may show right after login
DISMISS_SELECTORS = [
    'button:has-text("Close")',
    'button:has-text("Skip")',
    'button:has-text("Not Now")',
    '[aria-label="Close"]',
]


async def launch_browser(headless: bool = True) -> Tuple[Playwright, Browser]:
    """
    Start Playwright and launch Chromium.

    Returns:
        Tuple of (playwright, browser); both must be closed by the caller
    """
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=headless, args=BROWSER_ARGS)
    except Exception:
        await playwright.stop()
        raise
    logger.info(f"Browser launched (headless={headless})")
    return playwright, browser


async def apply_stealth(page: Page):
    """Apply playwright-stealth patches to a page"""
    from playwright_stealth import stealth_async

    await stealth_async(page)


async def best_effort(attempts: Iterable[Callable[[], Awaitable[object]]], label: str = "action") -> int:
    """
    Run each attempt in order, ignoring individual failures.

    A failing attempt never stops the next one from running.

    Returns:
        Number of attempts that completed without raising
    """
    succeeded = 0
    for index, attempt in enumerate(attempts):
        try:
            await attempt()
            succeeded += 1
        except Exception as e:
            logger.debug(f"{label} #{index + 1} skipped: {e}")
    return succeeded


async def click_if_visible(page: Page, selector: str, timeout: int = 1000) -> bool:
    """Click the element matched by `selector` only when it is on screen"""
    element = await page.query_selector(selector)
    if element is None or not await element.is_visible():
        return False
    await element.click(timeout=timeout)
    await page.wait_for_timeout(500)
    return True


async def dismiss_dialogs(page: Page, selectors: Sequence[str] = DISMISS_SELECTORS) -> int:
    """Close any popups left on screen; missing dialogs are not an error"""
    attempts: List[Callable[[], Awaitable[object]]] = [
        (lambda sel=selector: click_if_visible(page, sel)) for selector in selectors
    ]
    return await best_effort(attempts, label="dialog dismissal")


async def take_debug_screenshot(page: Page, name: str):
    """Take a screenshot for debugging purposes"""
    try:
        filename = f"{name}.png"
        await page.screenshot(path=filename)
        logger.info(f"Debug screenshot saved: {filename}")
    except Exception as e:
        logger.error(f"Screenshot failed: {e}")
