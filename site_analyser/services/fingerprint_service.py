# site_analyser/services/fingerprint_service.py
import re
from typing import Dict, Iterable, List, Pattern, Tuple

from site_analyser.models import ScriptAnalysis

# category -> (display name, pattern). Matching is case-sensitive against the full URL.
SCRIPT_PATTERNS: Dict[str, Tuple[Tuple[str, Pattern[str]], ...]] = {
    "cdns": (
        ("Cloudflare", re.compile(r"cloudflare|cdnjs")),
        ("jsDelivr", re.compile(r"jsdelivr")),
        ("unpkg", re.compile(r"unpkg")),
        ("Google CDN", re.compile(r"googleapis")),
    ),
    "libraries": (
        ("jQuery", re.compile(r"jquery")),
        ("Lodash", re.compile(r"lodash")),
        ("Moment.js", re.compile(r"moment")),
        ("D3.js", re.compile(r"d3\.")),
        ("Chart.js", re.compile(r"chart\.js")),
    ),
    "analytics": (
        ("Google Analytics", re.compile(r"google-analytics|gtag")),
        ("Facebook Pixel", re.compile(r"connect\.facebook\.net")),
        ("Hotjar", re.compile(r"hotjar")),
        ("Mixpanel", re.compile(r"mixpanel")),
    ),
    "advertising": (
        ("Google Ads", re.compile(r"googleadservices|googlesyndication")),
        ("Facebook Ads", re.compile(r"facebook\.com/tr")),
        ("Twitter Ads", re.compile(r"ads-twitter")),
    ),
}


def classify_scripts(scripts: Iterable[str]) -> ScriptAnalysis:
    """
    Sorts script URLs into CDNs, libraries, analytics and advertising.

    A name is listed once per category, in the order it was first matched.
    """
    found: Dict[str, List[str]] = {category: [] for category in SCRIPT_PATTERNS}
    for script in scripts:
        for category, rules in SCRIPT_PATTERNS.items():
            for name, pattern in rules:
                if pattern.search(script) and name not in found[category]:
                    found[category].append(name)
    return ScriptAnalysis(**found)
