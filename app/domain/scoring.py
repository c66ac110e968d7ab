"""
Security score aggregation.

The overall score is a weighted average of the five review dimensions. The
vulnerability dimension is stored inverted (0 = no findings, 100 = worst), so
it is flipped before weighting to put every dimension on the same
"100 = good" scale.
"""

from __future__ import annotations

import math
from typing import Dict, Optional

from app.domain.models import SecurityScores

SCORE_WEIGHTS: Dict[str, float] = {
    "supply_chain_security": 0.25,
    "vulnerability": 0.30,
    "quality": 0.20,
    "maintainability": 0.15,
    "license": 0.10,
}


def round_half_up(value: float) -> int:
    # Python's round() uses banker's rounding; scores round .5 upwards.
    return int(math.floor(value + 0.5))


def calculate_overall_score(scores: SecurityScores) -> int:
    """
    Combine the five review dimensions into a single 0-100 score.

    >>> calculate_overall_score(SecurityScores(supplyChainSecurity=90, vulnerability=10,
    ...                                        quality=80, maintainabile=70, license=100))
    86
    """
    inverted_vulnerability = 100 - scores.vulnerability
    total = (
        scores.supply_chain_security * SCORE_WEIGHTS["supply_chain_security"]
        + inverted_vulnerability * SCORE_WEIGHTS["vulnerability"]
        + scores.quality * SCORE_WEIGHTS["quality"]
        + scores.maintainability * SCORE_WEIGHTS["maintainability"]
        + scores.license * SCORE_WEIGHTS["license"]
    )
    return round_half_up(total)


def score_band(score: Optional[float]) -> Optional[str]:
    """Bucket a 0-100 score: good >= 80, fair >= 60, poor >= 40, otherwise critical."""
    if score is None:
        return None
    if score >= 80:
        return "good"
    if score >= 60:
        return "fair"
    if score >= 40:
        return "poor"
    return "critical"


def normalize_severity(severity: Optional[str]) -> str:
    if not severity or not severity.strip():
        return "UNKNOWN"
    return severity.strip().upper()
