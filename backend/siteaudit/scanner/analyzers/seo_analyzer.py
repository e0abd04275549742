# siteaudit/scanner/analyzers/seo_analyzer.py
"""
SEO Analyzer.

Two interpreters for the same question, "how well is this page set up for
search engines":

    parse_pagespeed(data)  Reads a Google PageSpeed Insights v5 response.
                           Measures SEO, performance, accessibility and
                           best practices.

    analyze_page(html)     Local fallback over the raw markup. Can only
                           measure on-page SEO basics; the other three
                           categories are reported as None (not measured).

Both return an SEOAnalysis; the SEO scanner turns it into a ScannerResult.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from siteaudit.scanner.base import Finding, severity_rank
from siteaudit.utils.scoring import round_half_up

logger = logging.getLogger(__name__)

# Lighthouse audits surfaced in the report
SEO_AUDIT_IDS = [
    "viewport", "document-title", "meta-description", "http-status-code",
    "link-text", "crawlable-anchors", "is-crawlable", "robots-txt",
    "hreflang", "canonical", "structured-data", "font-size", "tap-targets",
]

MAX_RECOMMENDATIONS = 10


@dataclass
class SEOAnalysis:
    score: int
    scores: Dict[str, Optional[int]]
    audits: List[Dict[str, Any]] = field(default_factory=list)
    recommendations: List[Dict[str, str]] = field(default_factory=list)
    method: str = "pagespeed"

    def findings(self, recommendation: str = "Fix the issue described above.") -> List[Finding]:
        out: List[Finding] = []
        used: set = set()
        for rec in self.recommendations:
            base = "seo-" + (re.sub(r"[^a-z0-9]+", "-", rec["title"].lower()).strip("-") or "issue")
            fid, n = base, 1
            while fid in used:
                n += 1
                fid = f"{base}-{n}"
            used.add(fid)
            out.append(Finding(
                id=fid,
                severity=rec["impact"],
                title=rec["title"],
                description=rec["description"],
                recommendation=recommendation,
            ))
        return out


def _impact(score: float) -> str:
    if score == 0:
        return "critical"
    if score < 0.5:
        return "high"
    if score < 0.9:
        return "medium"
    return "low"


def parse_pagespeed(data: Dict[str, Any]) -> SEOAnalysis:
    """
    Interpret a PageSpeed response. Raises KeyError/TypeError on a payload
    without lighthouseResult, which the caller treats as an API failure.
    """
    lhr = data["lighthouseResult"]
    categories = lhr.get("categories") or {}
    audits_raw: Dict[str, Dict[str, Any]] = lhr.get("audits") or {}

    def category(key: str) -> int:
        return round_half_up(((categories.get(key) or {}).get("score") or 0) * 100)

    scores = {
        "seo": category("seo"),
        "performance": category("performance"),
        "accessibility": category("accessibility"),
        "bestPractices": category("best-practices"),
    }

    audits = [
        {
            "title": audits_raw[aid].get("title", aid),
            "score": audits_raw[aid].get("score"),
            "description": audits_raw[aid].get("description", ""),
            "displayValue": audits_raw[aid].get("displayValue"),
        }
        for aid in SEO_AUDIT_IDS
        if aid in audits_raw
    ]

    recommendations = []
    for audit in audits_raw.values():
        score = audit.get("score")
        if score is None or not isinstance(score, (int, float)) or score >= 1:
            continue
        recommendations.append({
            "title": audit.get("title", "Untitled audit"),
            "description": audit.get("description", ""),
            "impact": _impact(score),
        })
    recommendations.sort(key=lambda r: severity_rank(r["impact"]))

    return SEOAnalysis(
        score=scores["seo"],
        scores=scores,
        audits=audits,
        recommendations=recommendations,
        method="pagespeed",
    )


def analyze_page(html: str) -> SEOAnalysis:
    """
    Local on-page checks. Starts at 100:
        title        missing -20; shorter than 10 or longer than 70 chars -5
        description  missing -20; shorter than 50 or longer than 320 chars -5
        <h1>         none -15; more than one -10
        image alts   up to -20, proportional to images missing alt
        canonical    missing -5
    """
    soup = BeautifulSoup(html, "html.parser")
    score = 100.0
    audits: List[Dict[str, Any]] = []
    recommendations: List[Dict[str, str]] = []

    # --- 1. Title ---
    title = soup.title.get_text().strip() if soup.title else ""
    if not title:
        score -= 20
        audits.append({"title": "Document Title", "score": 0, "description": "Missing <title> tag."})
        recommendations.append({
            "title": "Add Title Tag",
            "description": "Add a descriptive <title> tag to the head of your page.",
            "impact": "critical",
        })
    else:
        audits.append({"title": "Document Title", "score": 1, "description": "Title exists", "displayValue": title})
        if len(title) < 10:
            score -= 5
        if len(title) > 70:
            score -= 5

    # --- 2. Meta description ---
    meta = soup.find("meta", attrs={"name": "description"}) or soup.find(
        "meta", attrs={"property": "og:description"}
    )
    description = (meta.get("content") or "").strip() if meta else ""
    if not description:
        score -= 20
        audits.append({"title": "Meta Description", "score": 0, "description": "Missing meta description."})
        recommendations.append({
            "title": "Add Meta Description",
            "description": 'Add a <meta name="description"> tag to summarize your page content.',
            "impact": "high",
        })
    else:
        audits.append({
            "title": "Meta Description", "score": 1,
            "description": "Meta description exists", "displayValue": description,
        })
        if len(description) < 50:
            score -= 5
        if len(description) > 320:
            score -= 5

    # --- 3. H1 ---
    h1s = soup.find_all("h1")
    if not h1s:
        score -= 15
        audits.append({"title": "H1 Heading", "score": 0, "description": "No <h1> tag found."})
        recommendations.append({
            "title": "Add H1 Heading",
            "description": "Ensure the page has exactly one <h1> tag describing the main topic.",
            "impact": "high",
        })
    elif len(h1s) > 1:
        score -= 10
        audits.append({"title": "H1 Heading", "score": 0.5, "description": f"Found {len(h1s)} <h1> tags."})
        recommendations.append({
            "title": "Fix H1 Usage",
            "description": "Use only one <h1> tag per page.",
            "impact": "medium",
        })
    else:
        audits.append({
            "title": "H1 Heading", "score": 1, "description": "Valid H1 tag found",
            "displayValue": h1s[0].get_text().strip()[:50],
        })

    # --- 4. Image alt text ---
    images = soup.find_all("img")
    missing_alt = sum(1 for img in images if not img.get("alt"))
    if images and missing_alt:
        score -= min(20.0, missing_alt / len(images) * 20)
        audits.append({
            "title": "Image Alt Text", "score": 1 - missing_alt / len(images),
            "description": f"{missing_alt} images missing alt text.",
        })
        recommendations.append({
            "title": "Add Image Alt Attribute",
            "description": "Add descriptive alt text to all images for accessibility and SEO.",
            "impact": "medium",
        })
    else:
        audits.append({"title": "Image Alt Text", "score": 1, "description": "All images have alt text."})

    # --- 5. Canonical ---
    canonical = soup.find("link", rel="canonical")
    if not canonical or not canonical.get("href"):
        score -= 5
        audits.append({"title": "Canonical Tag", "score": 0, "description": "No canonical tag found."})
        recommendations.append({
            "title": "Add Canonical Tag",
            "description": 'Add a <link rel="canonical"> tag to prevent duplicate content issues.',
            "impact": "low",
        })
    else:
        audits.append({
            "title": "Canonical Tag", "score": 1,
            "description": "Canonical tag found.", "displayValue": canonical.get("href"),
        })

    final = max(0, round_half_up(score))
    return SEOAnalysis(
        score=final,
        scores={
            "seo": final,
            "performance": None,
            "accessibility": None,
            "bestPractices": None,
        },
        audits=audits,
        recommendations=recommendations,
        method="local",
    )
