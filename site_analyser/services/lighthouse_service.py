# site_analyser/services/lighthouse_service.py
import asyncio
import json
import logging
import random
import socket
from typing import Any, Awaitable, Callable, Dict, Optional

from site_analyser.core.config import Settings
from site_analyser.core.exceptions import AuditError
from site_analyser.models import AuditResult, ScoreSet
from site_analyser.services.browser_service import launch_browser
from site_analyser.services.processing_service import CATEGORIES, extract_issues, extract_scores

logger = logging.getLogger(__name__)

LighthouseCall = Callable[[str, int], Awaitable[Dict[str, Any]]]


def find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class AuditRunner:
    """
    Runs Lighthouse against a dedicated Chromium instance.

    The browser is launched with a remote debugging port and Lighthouse
    attaches to it through the CLI, so one request owns exactly one browser.
    """

    def __init__(self, settings: Settings, launcher=launch_browser, lighthouse: Optional[LighthouseCall] = None):
        self.settings = settings
        self._launch = launcher
        self._lighthouse = lighthouse or self.run_lighthouse

    async def run(self, url: str) -> AuditResult:
        """
        Audits `url` and returns its four category scores plus failing audits.

        Raises:
            AuditError: For any failure, including a report missing a category score.
        """
        try:
            port = find_free_port()
            args = self.settings.chrome_flags + [f"--remote-debugging-port={port}"]
            async with self._launch(args):
                lhr = await self._lighthouse(url, port)

            scores = extract_scores(lhr, url)
            issues = extract_issues(lhr, self.settings.ISSUE_SCORE_THRESHOLD)
        except Exception as e:
            raise AuditError(f"Lighthouse analysis failed: {str(e) or type(e).__name__}") from e

        logger.info(f"Lighthouse finished for {url}: {scores.model_dump()} ({len(issues)} issues)")
        return AuditResult(scores=scores, issues=issues)

    async def run_lighthouse(self, url: str, port: int) -> Dict[str, Any]:
        cmd = [
            self.settings.LIGHTHOUSE_PATH,
            url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            f"--only-categories={','.join(CATEGORIES)}",
            "--quiet",
        ]
        timeout = self.settings.AUDIT_TIMEOUT_SECONDS
        proc = await asyncio.create_subprocess_exec(
            *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            raise AuditError(f"Lighthouse timed out after {timeout:.0f}s")
        finally:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip()[-500:]
            raise AuditError(f"Lighthouse exited with code {proc.returncode}: {detail}")

        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise AuditError(f"Lighthouse returned invalid JSON: {e}") from e


class MockAuditRunner:
    """Demo mode: random scores, no browser and no Lighthouse."""

    async def run(self, url: str) -> AuditResult:
        scores = ScoreSet(
            performance=random.randint(60, 100),
            accessibility=random.randint(60, 100),
            best_practices=random.randint(60, 100),
            seo=random.randint(60, 100),
            url=url,
        )
        return AuditResult(scores=scores, issues=[])
