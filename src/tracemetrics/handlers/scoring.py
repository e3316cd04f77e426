"""Qualitative classification of page-load metric timings.

Every function takes an elapsed duration in microseconds. Upper bounds are
inclusive: a value equal to the GOOD bound is GOOD.
"""

from __future__ import annotations

from ..core.types import ScoreClassification

# Thresholds in microseconds.
# https://web.dev/fcp/
FCP_GOOD_TIMING = 1_800_000
FCP_MEDIUM_TIMING = 3_000_000
# https://web.dev/interactive/#how-lighthouse-determines-your-tti-score
TTI_GOOD_TIMING = 3_800_000
TTI_MEDIUM_TIMING = 7_300_000
# https://web.dev/lcp/#what-is-lcp
LCP_GOOD_TIMING = 2_500_000
LCP_MEDIUM_TIMING = 4_000_000
# https://web.dev/lighthouse-total-blocking-time/
TBT_GOOD_TIMING = 200_000
TBT_MEDIUM_TIMING = 600_000


def _classify(value: float, good: int, medium: int) -> ScoreClassification:
    if value <= good:
        return ScoreClassification.GOOD
    if value <= medium:
        return ScoreClassification.OK
    return ScoreClassification.BAD


def score_classification_for_first_contentful_paint(fcp_us: float) -> ScoreClassification:
    return _classify(fcp_us, FCP_GOOD_TIMING, FCP_MEDIUM_TIMING)


def score_classification_for_time_to_interactive(tti_us: float) -> ScoreClassification:
    return _classify(tti_us, TTI_GOOD_TIMING, TTI_MEDIUM_TIMING)


def score_classification_for_largest_contentful_paint(lcp_us: float) -> ScoreClassification:
    return _classify(lcp_us, LCP_GOOD_TIMING, LCP_MEDIUM_TIMING)


def score_classification_for_total_blocking_time(tbt_us: float) -> ScoreClassification:
    return _classify(tbt_us, TBT_GOOD_TIMING, TBT_MEDIUM_TIMING)


def score_classification_for_dom_content_loaded(_dcl_us: float) -> ScoreClassification:
    """DCL has no classification."""
    return ScoreClassification.UNCLASSIFIED


__all__ = [
    "FCP_GOOD_TIMING",
    "FCP_MEDIUM_TIMING",
    "LCP_GOOD_TIMING",
    "LCP_MEDIUM_TIMING",
    "TBT_GOOD_TIMING",
    "TBT_MEDIUM_TIMING",
    "TTI_GOOD_TIMING",
    "TTI_MEDIUM_TIMING",
    "score_classification_for_dom_content_loaded",
    "score_classification_for_first_contentful_paint",
    "score_classification_for_largest_contentful_paint",
    "score_classification_for_time_to_interactive",
    "score_classification_for_total_blocking_time",
]
