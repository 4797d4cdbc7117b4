import pytest

from conftest import make_lhr
from site_analyser.core.exceptions import AuditError
from site_analyser.models import ScriptAnalysis, ServerInfo, TechnicalSnapshot
from site_analyser.services.processing_service import (
    extract_issues,
    extract_scores,
    format_issues_for_llm,
    summarize_technical_data,
    to_percentage,
)


@pytest.mark.parametrize(
    "score, expected",
    [
        (0.0, 0),
        (1.0, 100),
        (0.95, 95),
        (0.82, 82),
        (0.125, 13),
        (0.005, 1),
        (0.895, 90),
        (0.994, 99),
        (0.996, 100),
    ],
)
def test_to_percentage_rounds_half_up(score, expected):
    assert to_percentage(score) == expected


class TestExtractScores:
    def test_scores_from_categories(self):
        scores = extract_scores(make_lhr(), "https://example.com")

        assert scores.model_dump(by_alias=True) == {
            "performance": 95,
            "accessibility": 99,
            "bestPractices": 100,
            "seo": 82,
            "url": "https://example.com/",
        }

    def test_falls_back_to_requested_url(self):
        lhr = make_lhr()
        del lhr["finalUrl"]

        assert extract_scores(lhr, "https://example.com").url == "https://example.com"

    def test_null_category_score_is_an_error(self):
        with pytest.raises(AuditError, match="seo"):
            extract_scores(make_lhr(seo=None), "https://example.com")

    def test_missing_category_is_an_error(self):
        lhr = make_lhr()
        del lhr["categories"]["best-practices"]

        with pytest.raises(AuditError, match="best-practices"):
            extract_scores(lhr, "https://example.com")


class TestExtractIssues:
    def test_only_failing_audits_with_description(self):
        audits = {
            "a": {"title": "Below threshold", "description": "Fix it.", "score": 0.89},
            "b": {"title": "Exactly threshold", "description": "Fine.", "score": 0.9},
            "c": {"title": "Not applicable", "description": "n/a", "score": None},
            "d": {"title": "No description", "description": "", "score": 0.1},
            "e": {"title": "Missing description", "score": 0.2},
            "f": {"title": "Zero", "description": "Broken.", "score": 0},
        }

        issues = extract_issues(make_lhr(audits=audits))

        assert [(i.title, i.score) for i in issues] == [("Below threshold", 89), ("Zero", 0)]

    def test_cutoff_uses_fractional_score(self):
        audits = {"a": {"title": "Nearly there", "description": "Almost.", "score": 0.895}}

        issues = extract_issues(make_lhr(audits=audits))

        assert [(i.title, i.score) for i in issues] == [("Nearly there", 90)]

    def test_threshold_is_configurable(self):
        audits = {"a": {"title": "Okay", "description": "Mostly fine.", "score": 0.95}}

        assert extract_issues(make_lhr(audits=audits)) == []
        assert len(extract_issues(make_lhr(audits=audits), threshold=1.0)) == 1

    def test_no_audits(self):
        lhr = make_lhr()
        del lhr["audits"]

        assert extract_issues(lhr) == []


def test_summarize_technical_data(snapshot):
    snapshot.script_analysis = ScriptAnalysis(cdns=["jsDelivr"])
    summary = summarize_technical_data(snapshot)

    assert "Technologies Detected: React, Google Tag Manager" in summary
    assert "Server: nginx" in summary
    assert "CDNs: jsDelivr" in summary
    assert "Analytics: None detected" in summary
    assert "Key Meta Tags: description, viewport" in summary


def test_summarize_limits_meta_keys():
    technical = TechnicalSnapshot(meta={f"key{i}": "v" for i in range(8)}, server_info=ServerInfo())

    summary = summarize_technical_data(technical)

    assert summary.endswith("Key Meta Tags: key0, key1, key2, key3, key4")


def test_summarize_without_snapshot():
    assert summarize_technical_data(None) == ""


def test_format_issues_for_llm():
    lhr = make_lhr(audits={
        str(i): {"title": f"Issue {i}", "description": f"Desc {i}", "score": 0.5} for i in range(7)
    })

    text = format_issues_for_llm(extract_issues(lhr))

    assert text.startswith("Issue 0 (50/100): Desc 0; Issue 1")
    assert "Issue 4" in text
    assert "Issue 5" not in text
