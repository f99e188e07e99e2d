# File: src/domain/content_filter/services/content_filter.py
"""
Keyword and pattern based text screening.

Results are advisory: they are attached to report details for admins and
never block a write on their own.
"""
import re
from typing import Any, Dict, List

# Placeholder entries, the production list is loaded per deployment
BLOCKED_WORDS: List[str] = [
    "explicit-word-1",
    "explicit-word-2",
]

SPAM_PATTERNS = [
    re.compile(r"buy\s+now", re.IGNORECASE),
    re.compile(r"click\s+here", re.IGNORECASE),
    re.compile(r"limited\s+time\s+offer", re.IGNORECASE),
    re.compile(r"act\s+now", re.IGNORECASE),
    re.compile(r"free\s+money", re.IGNORECASE),
    re.compile(r"make\s+\$?\d+", re.IGNORECASE),
    re.compile(r"earn\s+\$?\d+", re.IGNORECASE),
]

SCAM_PATTERNS = [
    re.compile(r"send\s+(me\s+)?money", re.IGNORECASE),
    re.compile(r"wire\s+transfer", re.IGNORECASE),
    re.compile(r"western\s+union", re.IGNORECASE),
    re.compile(r"bitcoin\s+wallet", re.IGNORECASE),
    re.compile(r"crypto\s+wallet", re.IGNORECASE),
    re.compile(r"pay\s+outside", re.IGNORECASE),
    re.compile(r"contact\s+me\s+at", re.IGNORECASE),
]


def _is_blank(text: Any) -> bool:
    return not text or not isinstance(text, str)


def _match_patterns(text: Any, patterns: List[re.Pattern]) -> Dict[str, Any]:
    if _is_blank(text):
        return {"is_clean": True, "matches": []}
    matches = [p.pattern for p in patterns if p.search(text)]
    return {"is_clean": not matches, "matches": matches}


def check_blocked_words(text: Any) -> Dict[str, Any]:
    if _is_blank(text):
        return {"is_clean": True, "matches": []}
    lower_text = text.lower()
    matches = [word for word in BLOCKED_WORDS if word.lower() in lower_text]
    return {"is_clean": not matches, "matches": matches}


def check_spam(text: Any) -> Dict[str, Any]:
    return _match_patterns(text, SPAM_PATTERNS)


def check_scam(text: Any) -> Dict[str, Any]:
    return _match_patterns(text, SCAM_PATTERNS)


def analyze(text: Any) -> Dict[str, Any]:
    checks = (
        ("blocked_words", check_blocked_words(text)),
        ("spam", check_spam(text)),
        ("scam", check_scam(text)),
    )
    issues = [
        {"type": issue_type, "details": result["matches"]}
        for issue_type, result in checks
        if not result["is_clean"]
    ]

    if not issues:
        risk_level = "low"
    elif len(issues) >= 2:
        risk_level = "high"
    else:
        risk_level = "medium"

    return {"is_clean": not issues, "issues": issues, "risk_level": risk_level}


def sanitize_text(text: Any) -> Any:
    """Mask blocked words with asterisks of the same length."""
    if _is_blank(text):
        return text
    sanitized = text
    for word in BLOCKED_WORDS:
        sanitized = re.sub(re.escape(word), "*" * len(word), sanitized, flags=re.IGNORECASE)
    return sanitized
