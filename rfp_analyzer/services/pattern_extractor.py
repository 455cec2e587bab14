"""
Pattern Extractor — rule-based field recovery from raw RFP text.

Recovers, on a best-effort basis:
  • deadline            (ordered date rules, first normalizable match wins)
  • budget_min / max    (labeled range > bare range > single value)
  • currency            (first ISO code or symbol, default USD)
  • client_name         (labeled "Issued by:" / "Client:" line)
  • requirements        (bullets, numbered items, must/shall sentences)

Does NOT:
  • Call any LLM or touch storage
  • Produce description or required_technologies
  • Raise — a rule that finds nothing leaves its field empty
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from rfp_analyzer.models.enums import Priority, RequirementCategory
from rfp_analyzer.models.schemas import ExtractionResult, RequirementCandidate
from rfp_analyzer.services.normalizer import (
    MONTH_NAME_PATTERN,
    MAGNITUDE_PATTERN,
    DateShape,
    find_magnitude,
    magnitude_multiplier,
    normalize_date,
    parse_amount,
)

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"
MIN_REQUIREMENT_LENGTH = 15
MAX_REQUIREMENT_LENGTH = 800
MAX_REQUIREMENTS = 30
MAGNITUDE_WINDOW = 12

MANDATORY_KEYWORDS = ("must", "shall", "required", "mandatory")

CURRENCY_SYMBOLS: dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
}
CURRENCY_CODES = ("USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "INR", "CNY")

# ── Date rules ───────────────────────────────────────────

_DATE_TOKEN = (
    rf"(?P<month_name>{MONTH_NAME_PATTERN}\.?\s+\d{{1,2}},?\s+\d{{4}})"
    rf"|(?P<day_month_name>\d{{1,2}}\s+{MONTH_NAME_PATTERN},?\s+\d{{4}})"
    r"|(?P<numeric>\d{1,4}[/-]\d{1,2}[/-]\d{2,4})(?!\d)"
)


def _labeled_date(label: str) -> re.Pattern:
    return re.compile(rf"{label}\b[^\n]{{0,25}}?(?:{_DATE_TOKEN})", re.IGNORECASE)


@dataclass(frozen=True)
class DateRule:
    name: str
    pattern: re.Pattern


DEADLINE_RULES: tuple[DateRule, ...] = (
    DateRule("deadline", _labeled_date(r"deadline")),
    DateRule("due_date", _labeled_date(r"due\s+date")),
    DateRule("submission_date", _labeled_date(r"submission\s+date")),
    DateRule(
        "bare_numeric",
        re.compile(r"(?<!\d)(?P<numeric>\d{1,2}[/-]\d{1,2}[/-]\d{2,4})(?!\d)"),
    ),
)

# ── Money rules ──────────────────────────────────────────

_CODES_ALT = "|".join(CURRENCY_CODES)
_SYMBOLS_CLASS = "[" + "".join(re.escape(s) for s in CURRENCY_SYMBOLS) + "]"
_RANGE_SEPARATOR = r"\s*(?P<sep>to|and|-|–|—)\s*"

# an amount never runs into a date ("15/11/2025", "15.11.2025", "15-11-2025")
_NOT_DATE = r"(?![\d,]|[/.]\d|-\d{1,2}[/-]\d)"


def _money(name: str, marker_required: bool = True) -> str:
    marker = rf"(?P<{name}_marker>{_SYMBOLS_CLASS}|\b(?:{_CODES_ALT})\s?)\s*"
    if not marker_required:
        marker = f"(?:{marker})?"
    return (
        rf"{marker}(?P<{name}_amount>\d[\d,]*(?:\.\d+)?){_NOT_DATE}"
        rf"(?:[ \t]*(?P<{name}_suffix>{MAGNITUDE_PATTERN}))?"
    )


_BUDGET_LABEL = rf"budget[^\n\d$€£¥]{{0,40}}?"

_LABELED_RANGE_RE = re.compile(
    _BUDGET_LABEL + _money("low", False) + _RANGE_SEPARATOR + _money("high", False),
    re.IGNORECASE,
)
_BARE_RANGE_RE = re.compile(
    _money("low") + _RANGE_SEPARATOR + _money("high", False),
    re.IGNORECASE,
)
_LABELED_SINGLE_RE = re.compile(_BUDGET_LABEL + _money("single", False), re.IGNORECASE)
_BARE_SINGLE_RE = re.compile(_money("single"), re.IGNORECASE)

_CURRENCY_RE = re.compile(rf"(?P<symbol>{_SYMBOLS_CLASS})|\b(?P<code>{_CODES_ALT})\b")

# ── Client name ──────────────────────────────────────────

_CLIENT_RE = re.compile(
    r"(?:Issuing\s+Organi[sz]ation|Issued\s+by|Client(?:\s+Name)?|Organi[sz]ation)"
    r"[ \t]*:[ \t]*([^\n]+)",
    re.IGNORECASE,
)

# ── Requirement patterns (applied in order) ──────────────

_REQUIREMENT_PATTERNS: tuple[re.Pattern, ...] = (
    # ● / • / - bullets
    re.compile(r"^[ \t]*[●•▪◦‣∙·*\-–][ \t]+(.+)$", re.MULTILINE),
    # 1.  / 2.3) / (a) / b)
    re.compile(
        r"^[ \t]*(?:\d{1,3}(?:\.\d{1,3})*[.)]|\(?[a-z]\))[ \t]+(.+)$",
        re.MULTILINE,
    ),
    # free-standing must / shall sentences
    re.compile(
        r"([A-Z][^.!?\n]*?\b(?:must|shall|required|mandatory)\b[^.!?\n]*[.!?]?)",
        re.IGNORECASE,
    ),
)

_CATEGORY_RULES: tuple[tuple[RequirementCategory, re.Pattern], ...] = (
    (
        RequirementCategory.COMPLIANCE,
        re.compile(
            r"\b(?:complian|comply|regulat|gdpr|hipaa|iso\s?\d|soc\s?2|legal|"
            r"policy|policies|accessib|wcag|data protection|privacy)",
            re.IGNORECASE,
        ),
    ),
    (
        RequirementCategory.QUALIFICATION,
        re.compile(
            r"\b(?:experience|certified|certification|qualifi|years of|"
            r"track record|reference|portfolio|expertise|licen[cs]ed)",
            re.IGNORECASE,
        ),
    ),
    (
        RequirementCategory.FINANCIAL,
        re.compile(
            r"\b(?:cost|price|pricing|budget|payment|invoice|fee|financial|"
            r"insurance|bond)",
            re.IGNORECASE,
        ),
    ),
    (
        RequirementCategory.DELIVERABLE,
        re.compile(
            r"\b(?:deliver|report|documentation|milestone|submit|prototype|"
            r"handover|hand-over)",
            re.IGNORECASE,
        ),
    ),
    (
        RequirementCategory.OPERATIONAL,
        re.compile(
            r"\b(?:support|maintenance|sla|uptime|availability|24/7|training|"
            r"hosting|monitor|backup|incident|on-site)",
            re.IGNORECASE,
        ),
    ),
)

_WHITESPACE_RE = re.compile(r"\s+")


class PatternExtractor:
    """
    Regex fallback extractor.

        result = PatternExtractor().extract(text)

    Pure: the same text always yields the same ExtractionResult.
    """

    def __init__(
        self,
        min_length: int = MIN_REQUIREMENT_LENGTH,
        max_length: int = MAX_REQUIREMENT_LENGTH,
        max_requirements: int = MAX_REQUIREMENTS,
    ):
        self.min_length = min_length
        self.max_length = max_length
        self.max_requirements = max_requirements

    def extract(self, text: str) -> ExtractionResult:
        text = text or ""
        budget_min, budget_max = self.extract_budget(text)
        result = ExtractionResult(
            client_name=self.extract_client_name(text),
            deadline=self.extract_deadline(text),
            budget_min=budget_min,
            budget_max=budget_max,
            currency=self.extract_currency(text),
            requirements=self.extract_requirements(text),
        )
        logger.info(
            f"[PATTERN] deadline={result.deadline} budget={budget_min}..{budget_max} "
            f"currency={result.currency} requirements={len(result.requirements)}"
        )
        return result

    # ── Deadline ─────────────────────────────────────────

    @staticmethod
    def extract_deadline(text: str) -> Optional[str]:
        for rule in DEADLINE_RULES:
            for m in rule.pattern.finditer(text):
                token, shape = _date_token(m)
                iso = normalize_date(token, shape) if token else None
                if iso:
                    logger.debug(f"[PATTERN] deadline via rule '{rule.name}': {token!r} → {iso}")
                    return iso
        return None

    # ── Budget ───────────────────────────────────────────

    @staticmethod
    def extract_budget(text: str) -> tuple[Optional[float], Optional[float]]:
        """Return (budget_min, budget_max); a single value fills only the max."""
        for pattern in (_LABELED_RANGE_RE, _BARE_RANGE_RE):
            for m in pattern.finditer(text):
                # "and" only joins two amounts when the upper one is marked as money
                if m.group("sep").lower() == "and" and not (
                    m.group("high_marker") or m.group("high_suffix")
                ):
                    continue
                low = parse_amount(m.group("low_amount"))
                high = parse_amount(m.group("high_amount"))
                if low is None or high is None:
                    continue
                shared = m.group("high_suffix") or find_magnitude(
                    text[m.end(): m.end() + MAGNITUDE_WINDOW]
                )
                low *= magnitude_multiplier(m.group("low_suffix") or shared)
                high *= magnitude_multiplier(m.group("high_suffix") or shared)
                return round(low, 2), round(high, 2)

        for pattern in (_LABELED_SINGLE_RE, _BARE_SINGLE_RE):
            m = pattern.search(text)
            if not m:
                continue
            value = parse_amount(m.group("single_amount"))
            if value is None:
                continue
            suffix = m.group("single_suffix") or find_magnitude(
                text[m.end(): m.end() + MAGNITUDE_WINDOW]
            )
            return None, round(value * magnitude_multiplier(suffix), 2)

        return None, None

    # ── Currency ─────────────────────────────────────────

    @staticmethod
    def extract_currency(text: str) -> str:
        m = _CURRENCY_RE.search(text)
        if not m:
            return DEFAULT_CURRENCY
        if m.group("symbol"):
            return CURRENCY_SYMBOLS[m.group("symbol")]
        return m.group("code")

    # ── Client ───────────────────────────────────────────

    @staticmethod
    def extract_client_name(text: str) -> Optional[str]:
        m = _CLIENT_RE.search(text)
        if not m:
            return None
        name = m.group(1).strip()[:200]
        return name or None

    # ── Requirements ─────────────────────────────────────

    def extract_requirements(self, text: str) -> list[RequirementCandidate]:
        seen: set[str] = set()
        candidates: list[RequirementCandidate] = []

        for pattern in _REQUIREMENT_PATTERNS:
            for m in pattern.finditer(text):
                normalized = normalize_requirement_text(m.group(1))
                if not (self.min_length <= len(normalized) <= self.max_length):
                    continue
                if normalized in seen:
                    continue
                seen.add(normalized)
                candidates.append(build_candidate(normalized))
                if len(candidates) >= self.max_requirements:
                    return candidates
        return candidates


# ── Helpers (module-level) ───────────────────────────────


def _date_token(m: re.Match) -> tuple[Optional[str], DateShape]:
    groups = m.groupdict()
    if groups.get("month_name"):
        return groups["month_name"], DateShape.MONTH_NAME
    if groups.get("day_month_name"):
        return groups["day_month_name"], DateShape.DAY_MONTH_NAME
    return groups.get("numeric"), DateShape.NUMERIC


def normalize_requirement_text(raw: str) -> str:
    """Collapse internal whitespace and trim."""
    return _WHITESPACE_RE.sub(" ", raw or "").strip()


def is_mandatory(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in MANDATORY_KEYWORDS)


def classify_requirement(text: str) -> RequirementCategory:
    for category, pattern in _CATEGORY_RULES:
        if pattern.search(text):
            return category
    return RequirementCategory.TECHNICAL


def build_candidate(text: str) -> RequirementCandidate:
    mandatory = is_mandatory(text)
    return RequirementCandidate(
        text=text,
        category=classify_requirement(text),
        priority=Priority.HIGH if mandatory else Priority.MEDIUM,
        is_mandatory=mandatory,
    )
