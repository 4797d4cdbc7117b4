# site_analyser/services/processing_service.py
import math
from typing import Any, Dict, List, Optional

from site_analyser.core.exceptions import AuditError
from site_analyser.models import Issue, ScoreSet, TechnicalSnapshot

# Lighthouse category id -> ScoreSet field
CATEGORIES = {
    "performance": "performance",
    "accessibility": "accessibility",
    "best-practices": "best_practices",
    "seo": "seo",
}

DEFAULT_ISSUE_THRESHOLD = 0.9


def to_percentage(score: float) -> int:
    """Scales a 0.0-1.0 Lighthouse score to 0-100, rounding halves up."""
    return int(math.floor(score * 100 + 0.5))


def extract_scores(lhr: Dict[str, Any], requested_url: str) -> ScoreSet:
    """
    Builds the ScoreSet from a Lighthouse result (lhr).

    Args:
        lhr: The parsed Lighthouse JSON report.
        requested_url: Used when the report carries no final URL.

    Raises:
        AuditError: If one of the four categories is missing or has no score.
    """
    categories = lhr.get("categories") or {}
    values = {}
    for category_id, field_name in CATEGORIES.items():
        score = (categories.get(category_id) or {}).get("score")
        if score is None:
            raise AuditError(f"Lighthouse report has no score for '{category_id}'")
        values[field_name] = to_percentage(score)

    final_url = lhr.get("finalUrl") or lhr.get("finalDisplayedUrl") or requested_url
    return ScoreSet(url=final_url, **values)


def extract_issues(lhr: Dict[str, Any], threshold: float = DEFAULT_ISSUE_THRESHOLD) -> List[Issue]:
    """
    Collects every audit that scored below `threshold`.

    Audits without a score (informative / not applicable) or without a
    description are skipped.
    """
    issues = []
    for audit in (lhr.get("audits") or {}).values():
        score = audit.get("score")
        description = audit.get("description")
        if score is None or score >= threshold or not description:
            continue
        issues.append(
            Issue(
                title=audit.get("title") or audit.get("id", ""),
                description=description,
                score=to_percentage(score),
            )
        )
    return issues


def _names_or_none(names: List[str]) -> str:
    return ", ".join(names) or "None detected"


def summarize_technical_data(technical: Optional[TechnicalSnapshot]) -> str:
    """
    Formats the technical snapshot into the short block used in the LLM prompt.
    """
    if technical is None:
        return ""

    lines = [
        f"Technologies Detected: {_names_or_none(technical.technologies)}",
        f"Server: {technical.server_info.server}",
        f"CDNs: {_names_or_none(technical.script_analysis.cdns)}",
        f"Analytics: {_names_or_none(technical.script_analysis.analytics)}",
        f"Key Meta Tags: {', '.join(list(technical.meta)[:5])}",
    ]
    return "\n" + "\n".join(lines)


def format_issues_for_llm(issues: List[Issue], limit: int = 5) -> str:
    return "; ".join(
        f"{issue.title} ({issue.score}/100): {issue.description}" for issue in issues[:limit]
    )
