# site_analyser/services/inspection_service.py
import logging
from typing import Dict, List, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from site_analyser.core.config import Settings
from site_analyser.core.exceptions import InspectionError
from site_analyser.models import ServerInfo, TechnicalSnapshot
from site_analyser.services.browser_service import launch_browser
from site_analyser.services.fingerprint_service import classify_scripts

logger = logging.getLogger(__name__)

# (name, JS expression). Each expression is evaluated on its own inside the page.
TECHNOLOGY_PROBES: Tuple[Tuple[str, str], ...] = (
    ("React", "window.React || document.querySelector('[data-reactroot]')"),
    ("Vue.js", "window.Vue || document.querySelector('[data-v-]')"),
    ("Angular", "window.angular || window.ng || document.querySelector('[ng-app]')"),
    ("jQuery", "window.jQuery || window.$"),
    ("Bootstrap", "document.querySelector('link[href*=\"bootstrap\"]') || document.querySelector('.container')"),
    (
        "WordPress",
        "document.querySelector('meta[name=\"generator\"][content*=\"WordPress\"]')"
        " || document.querySelector('link[href*=\"wp-content\"]')",
    ),
    ("Shopify", "window.Shopify || document.querySelector('script[src*=\"shopify\"]')"),
    (
        "Google Analytics",
        "window.gtag || window.ga || document.querySelector('script[src*=\"google-analytics\"]')",
    ),
    (
        "Google Tag Manager",
        "window.google_tag_manager || document.querySelector('script[src*=\"googletagmanager\"]')",
    ),
    ("Cloudflare", "document.querySelector('script[src*=\"cloudflare\"]') || document.querySelector('[data-cf-beacon]')"),
    ("Font Awesome", "document.querySelector('link[href*=\"font-awesome\"]') || document.querySelector('i[class*=\"fa-\"]')"),
    (
        "Tailwind CSS",
        "document.querySelector('link[href*=\"tailwind\"]') || document.documentElement.className.includes('tailwind')",
    ),
)

COLLECT_PAGE_DATA_JS = """
() => {
    const metaTags = Array.from(document.querySelectorAll('meta'))
        .map(el => [el.getAttribute('name') || el.getAttribute('property'), el.getAttribute('content')])
        .filter(([name, content]) => name && content);
    const scripts = Array.from(document.querySelectorAll('script[src]'))
        .map(el => el.getAttribute('src'))
        .filter(Boolean);
    return { metaTags, scripts };
}
"""


async def detect_technologies(page: Page) -> List[str]:
    """
    Runs every probe in TECHNOLOGY_PROBES against the loaded page.

    A probe that throws is reported as not detected and does not stop the others.
    """
    detected = []
    for name, expression in TECHNOLOGY_PROBES:
        try:
            if await page.evaluate(f"() => Boolean({expression})"):
                detected.append(name)
        except PlaywrightError as e:
            logger.debug(f"Probe for {name} failed: {e}")
    return detected


def collect_meta(meta_tags: List[List[str]]) -> Dict[str, str]:
    """Maps meta `name`/`property` to `content`. The first tag with a given key wins."""
    meta: Dict[str, str] = {}
    for name, content in meta_tags:
        meta.setdefault(name, content)
    return meta


def extract_server_info(headers: Dict[str, str]) -> ServerInfo:
    headers = {key.lower(): value for key, value in headers.items()}
    return ServerInfo(
        server=headers.get("server") or "Unknown",
        powered_by=headers.get("x-powered-by") or "Unknown",
        content_type=headers.get("content-type") or "Unknown",
    )


class TechnicalInspector:
    def __init__(self, settings: Settings, launcher=launch_browser):
        self.settings = settings
        self._launch = launcher

    async def inspect(self, url: str) -> TechnicalSnapshot:
        """
        Loads `url` in a fresh browser and fingerprints its stack.

        Raises:
            InspectionError: If the browser cannot start or navigation fails or times out.
        """
        try:
            async with self._launch(self.settings.chrome_flags) as browser:
                page = await browser.new_page()
                response = await page.goto(
                    url, wait_until="networkidle", timeout=self.settings.NAVIGATION_TIMEOUT_MS
                )
                technologies = await detect_technologies(page)
                page_data = await page.evaluate(COLLECT_PAGE_DATA_JS)
                headers = response.headers if response is not None else {}
        except Exception as e:
            raise InspectionError(f"Technical analysis failed: {str(e) or type(e).__name__}") from e

        scripts = page_data.get("scripts") or []
        snapshot = TechnicalSnapshot(
            technologies=technologies,
            meta=collect_meta(page_data.get("metaTags") or []),
            scripts=scripts,
            script_analysis=classify_scripts(scripts),
            server_info=extract_server_info(headers),
        )
        logger.info(f"Technical analysis finished for {url}: {', '.join(technologies) or 'no technologies detected'}")
        return snapshot
