# site_analyser/services/llm_service.py
import html
import logging
from typing import List, Literal, Optional

from langchain_core.runnables import Runnable
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_groq import ChatGroq

from site_analyser.core.config import Settings
from site_analyser.core.exceptions import GenerationError
from site_analyser.models import Issue, ScoreSet, TechnicalSnapshot
from site_analyser.services.processing_service import format_issues_for_llm, summarize_technical_data

logger = logging.getLogger(__name__)

REPORT_PROMPT_TEMPLATE = """Based on this comprehensive website analysis, create a friendly, easy-to-understand HTML report for a website owner:

URL: {url}
Performance Score: {performance}/100
Accessibility Score: {accessibility}/100
Best Practices Score: {best_practices}/100
SEO Score: {seo}/100

Key Issues Found: {issues}

Technical Stack Analysis:{technical_summary}

Please provide a well-formatted HTML response with:
1. A brief overall summary of the website's performance
2. Technical stack overview and recommendations
3. Top 3 priority improvements with specific, actionable steps
4. Positive aspects to highlight
5. Simple explanations without technical jargon

Use proper HTML formatting with headings (h3, h4), paragraphs, lists (ul/ol), and emphasis tags (strong, em).
Keep the tone encouraging and focus on practical next steps.
Do not include DOCTYPE, html, head, or body tags - just the content HTML."""

prompt = ChatPromptTemplate.from_messages([("human", REPORT_PROMPT_TEMPLATE)])

TEMPLATE_ISSUE_LIMIT = 3
PROMPT_ISSUE_LIMIT = 5

AI_DISABLED_NOTE = "To get AI-powered recommendations and detailed insights, set the GROQ_API_KEY environment variable."
MOCK_NOTE = "Demo mode: these scores are randomly generated and no audit was run."


def _score_lines(scores: ScoreSet) -> List[tuple]:
    return [
        ("Performance", scores.performance),
        ("Accessibility", scores.accessibility),
        ("Best Practices", scores.best_practices),
        ("SEO", scores.seo),
    ]


def render_html_report(scores: ScoreSet, issues: List[Issue], note: str) -> str:
    parts = [
        "<h3>Website Analysis Complete!</h3>",
        f"<p>Analysis for: <strong>{html.escape(scores.url)}</strong></p>",
        "<p>Your website scored:</p>",
        "<ul>",
    ]
    parts += [f"<li><strong>{label}:</strong> {value}/100</li>" for label, value in _score_lines(scores)]
    parts.append("</ul>")
    if issues:
        parts.append("<h4>Key issues to address</h4>")
        parts.append("<ul>")
        parts += [f"<li>{html.escape(issue.title)}</li>" for issue in issues[:TEMPLATE_ISSUE_LIMIT]]
        parts.append("</ul>")
    parts.append(f"<p><em>{note}</em></p>")
    return "\n".join(parts)


def render_text_report(scores: ScoreSet, issues: List[Issue], note: str) -> str:
    lines = ["Website Analysis Complete!", "", "Your website scored:"]
    lines += [f"• {label}: {value}/100" for label, value in _score_lines(scores)]
    lines += ["", note]
    if issues:
        lines += ["", "Key issues to address:"]
        lines += [f"• {issue.title}" for issue in issues[:TEMPLATE_ISSUE_LIMIT]]
    return "\n".join(lines)


class ReportComposer:
    """
    Turns audit results into the `aiReport` text.

    With an API key (or an injected chat model) the report is written by the
    LLM, otherwise a fixed template is filled in. Mock mode always uses the
    template.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        mock_mode: bool = False,
        model: str = "llama-3.3-70b-versatile",
        max_tokens: int = 1000,
        temperature: float = 0.7,
        timeout: Optional[float] = 60.0,
        report_format: Literal["html", "text"] = "html",
        llm: Optional[Runnable] = None,
    ):
        self.mock_mode = mock_mode
        self.report_format = report_format
        self.generated = not mock_mode and (llm is not None or bool(api_key))
        self._chain = None
        if self.generated:
            if llm is None:
                llm = ChatGroq(
                    model_name=model,
                    groq_api_key=api_key,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    timeout=timeout,
                    max_retries=0,
                )
            self._chain = prompt | llm | StrOutputParser()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReportComposer":
        return cls(
            settings.GROQ_API_KEY,
            mock_mode=settings.ANALYSIS_MODE == "mock",
            model=settings.LLM_MODEL,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=settings.LLM_TEMPERATURE,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            report_format=settings.REPORT_FORMAT,
        )

    async def compose(
        self, scores: ScoreSet, issues: List[Issue], technical: Optional[TechnicalSnapshot] = None
    ) -> str:
        if not self.generated:
            return self.render_template(scores, issues)

        try:
            report = await self._chain.ainvoke({
                "url": scores.url,
                "performance": scores.performance,
                "accessibility": scores.accessibility,
                "best_practices": scores.best_practices,
                "seo": scores.seo,
                "issues": format_issues_for_llm(issues, PROMPT_ISSUE_LIMIT),
                "technical_summary": summarize_technical_data(technical),
            })
        except Exception as e:
            raise GenerationError(f"AI report generation failed: {str(e) or type(e).__name__}") from e

        logger.info(f"AI report generated for {scores.url} ({len(report)} chars)")
        return report

    def render_template(self, scores: ScoreSet, issues: List[Issue]) -> str:
        note = MOCK_NOTE if self.mock_mode else AI_DISABLED_NOTE
        if self.report_format == "text":
            return render_text_report(scores, issues, note)
        return render_html_report(scores, issues, note)
