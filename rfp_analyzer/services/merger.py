"""
Reconciliation Merger — combine the remote and pattern extractions.

Scalar fields resolve independently through three tiers:
  remote → pattern → stored RFP value
required_technologies comes from the remote result only, and the
requirement list is taken whole from one source (remote when non-empty,
otherwise pattern). After resolution the budget bounds are checked:
  - min > max across tiers  → the lower-precedence bound is dropped
  - min > max in one tier   → the bounds are swapped
Every correction is written to MergeReport.notes.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from rfp_analyzer.models.enums import SourceTier
from rfp_analyzer.models.schemas import ExtractionResult, MergeReport, RfpRecord
from rfp_analyzer.services.pattern_extractor import DEFAULT_CURRENCY

logger = logging.getLogger(__name__)

SCALAR_FIELDS = (
    "title",
    "client_name",
    "deadline",
    "budget_min",
    "budget_max",
    "currency",
    "description",
)

_TIER_RANK = {
    SourceTier.REMOTE: 0,
    SourceTier.PATTERN: 1,
    SourceTier.STORED: 2,
    SourceTier.NONE: 3,
}


def resolve_field(remote: Any, pattern: Any, stored: Any) -> tuple[Any, SourceTier]:
    """First non-empty value in tier order, with the tier it came from."""
    for value, tier in (
        (remote, SourceTier.REMOTE),
        (pattern, SourceTier.PATTERN),
        (stored, SourceTier.STORED),
    ):
        if _present(value):
            return value, tier
    return None, SourceTier.NONE


def merge(
    remote: Optional[ExtractionResult],
    pattern: ExtractionResult,
    stored: Optional[RfpRecord] = None,
) -> MergeReport:
    remote = remote or ExtractionResult()
    values: dict[str, Any] = {}
    sources: dict[str, SourceTier] = {}

    for field in SCALAR_FIELDS:
        stored_value = getattr(stored, field, None) if stored is not None else None
        if field == "title" and stored_value == RfpRecord.model_fields["title"].default:
            stored_value = None
        value, tier = resolve_field(getattr(remote, field), getattr(pattern, field), stored_value)
        values[field] = value
        sources[field] = tier

    if values["currency"] is None:
        values["currency"] = DEFAULT_CURRENCY

    values["required_technologies"] = list(remote.required_technologies)
    sources["required_technologies"] = (
        SourceTier.REMOTE if remote.required_technologies else SourceTier.NONE
    )

    if remote.requirements:
        values["requirements"] = list(remote.requirements)
        sources["requirements"] = SourceTier.REMOTE
    elif pattern.requirements:
        values["requirements"] = list(pattern.requirements)
        sources["requirements"] = SourceTier.PATTERN
    else:
        values["requirements"] = []
        sources["requirements"] = SourceTier.NONE

    notes = _reconcile_budget(values, sources)

    result = ExtractionResult(**values)
    logger.info(
        f"[MERGE] deadline={result.deadline} ({sources['deadline'].value}) | "
        f"budget={result.budget_min}–{result.budget_max} {result.currency} | "
        f"requirements={len(result.requirements)} ({sources['requirements'].value})"
    )
    for note in notes:
        logger.warning(f"[MERGE] {note}")
    return MergeReport(result=result, field_sources=sources, notes=notes)


def _reconcile_budget(values: dict[str, Any], sources: dict[str, SourceTier]) -> list[str]:
    low, high = values["budget_min"], values["budget_max"]
    if low is None or high is None or low <= high:
        return []

    low_tier, high_tier = sources["budget_min"], sources["budget_max"]
    if low_tier == high_tier:
        values["budget_min"], values["budget_max"] = high, low
        return [f"budget_min {low} > budget_max {high} from {low_tier.value}; bounds swapped"]

    if _TIER_RANK[low_tier] > _TIER_RANK[high_tier]:
        values["budget_min"] = None
        sources["budget_min"] = SourceTier.NONE
        return [
            f"budget_min {low} ({low_tier.value}) exceeds budget_max {high} "
            f"({high_tier.value}); budget_min dropped"
        ]

    values["budget_max"] = None
    sources["budget_max"] = SourceTier.NONE
    return [
        f"budget_min {low} ({low_tier.value}) exceeds budget_max {high} "
        f"({high_tier.value}); budget_max dropped"
    ]


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True
