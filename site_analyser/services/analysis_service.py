# site_analyser/services/analysis_service.py
import logging
from typing import Optional
from urllib.parse import urlparse

from site_analyser.core.config import Settings
from site_analyser.core.exceptions import InvalidURLError
from site_analyser.models import AnalysisReport, TechnicalSnapshot
from site_analyser.services.inspection_service import TechnicalInspector
from site_analyser.services.lighthouse_service import AuditRunner, MockAuditRunner
from site_analyser.services.llm_service import ReportComposer

logger = logging.getLogger(__name__)

INVALID_URL_MESSAGE = "Please provide a valid URL starting with http:// or https://"


def validate_url(url: Optional[str]) -> str:
    """
    Checks that `url` is an http(s) URL whose host contains a dot.

    Raises:
        InvalidURLError: If the URL is missing or malformed.
    """
    if not url or not url.strip():
        raise InvalidURLError("URL is required")

    url = url.strip()
    try:
        parsed = urlparse(url)
        host = parsed.hostname or ""
    except ValueError:
        raise InvalidURLError(INVALID_URL_MESSAGE)

    # at least one dot, with a non-empty label on each side of every dot
    if parsed.scheme not in ("http", "https") or "." not in host or not all(host.split(".")):
        raise InvalidURLError(INVALID_URL_MESSAGE)
    return url


class AnalysisService:
    """
    Runs one analysis end to end: Lighthouse audit, technical inspection,
    then the report.

    Audit and report failures propagate. A failed inspection is logged and
    the report is built without technical data.
    """

    def __init__(
        self,
        audit_runner,
        report_composer: ReportComposer,
        inspector: Optional[TechnicalInspector] = None,
    ):
        self.audit_runner = audit_runner
        self.report_composer = report_composer
        self.inspector = inspector

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalysisService":
        if settings.ANALYSIS_MODE == "mock":
            audit_runner = MockAuditRunner()
        else:
            audit_runner = AuditRunner(settings)
        inspector = TechnicalInspector(settings) if settings.ANALYSIS_MODE == "full" else None
        return cls(audit_runner, ReportComposer.from_settings(settings), inspector)

    async def analyze(self, url: str) -> AnalysisReport:
        logger.info(f"Running Lighthouse analysis for {url}")
        audit = await self.audit_runner.run(url)

        technical = await self._inspect(url)

        logger.info("Generating report...")
        ai_report = await self.report_composer.compose(audit.scores, audit.issues, technical)
        logger.info(f"Report generated for {url}")

        return AnalysisReport(scores=audit.scores, technical_data=technical, ai_report=ai_report)

    async def _inspect(self, url: str) -> Optional[TechnicalSnapshot]:
        if self.inspector is None:
            return None

        logger.info(f"Running technical analysis for {url}")
        try:
            return await self.inspector.inspect(url)
        except Exception as e:
            logger.error(f"{e}. Continuing without technical analysis data")
            return None
