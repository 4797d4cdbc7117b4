# site_analyser/services/browser_service.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List

from playwright.async_api import Browser, async_playwright

logger = logging.getLogger(__name__)


@asynccontextmanager
async def launch_browser(args: List[str], headless: bool = True) -> AsyncIterator[Browser]:
    """
    Launches a headless Chromium and closes it when the block exits,
    whether it exits normally or with an exception.
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless, args=args)
        logger.info("Chromium launched")
        try:
            yield browser
        finally:
            await browser.close()
            logger.info("Chromium closed")
