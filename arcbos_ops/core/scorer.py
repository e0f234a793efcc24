"""Supplier weighted scoring and BOM health assessment."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Union

import numpy as np

from ..config.settings import RuleSet
from ..utils.records import as_mapping, to_number

logger = logging.getLogger(__name__)

HEALTHY_MAX_MISSING_RATE = 0.05
ATTENTION_MAX_MISSING_RATE = 0.15
HIGH_CRIT_RATE_LIMIT = 0.3

NO_DATA = 'No data'
HEALTHY = 'Healthy'
ATTENTION = 'Attention'
AT_RISK = 'At risk'

HEALTH_HINTS = {
    NO_DATA: "BOM nodes are empty.",
    HEALTHY: "Supplier coverage looks strong for the current BOM snapshot.",
    ATTENTION: "Some nodes have no supplier assigned. Close gaps before Beta builds.",
    AT_RISK: "Too many nodes lack supplier coverage. Expect schedule slips and cost surprises.",
}
HIGH_CRIT_HINT = ("Supplier coverage is fine, but more than 30% of nodes are high criticality. "
                  "Confirm second sources before Beta builds.")


@dataclass(frozen=True)
class WeightedScore:
    """Weighted supplier score on the raw scale and as a 0-100 percentage."""
    avg: float
    pct: float
    range_min: float
    range_max: float
    weights: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'avg': self.avg,
            'pct': self.pct,
            'rangeMin': self.range_min,
            'rangeMax': self.range_max,
            'weights': dict(self.weights),
        }


@dataclass(frozen=True)
class BomHealth:
    label: str
    hint: str
    missing_rate: float = 0.0
    high_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'hint': self.hint,
            'missingRate': self.missing_rate,
            'highRate': self.high_rate,
        }


def weighted_supplier_score(raw_scores: Any, weights: Any) -> float:
    """Weighted mean of raw scores over positively weighted categories.

    Categories with a non-positive or non-numeric weight, or without a
    finite raw score, are left out. Returns 0.0 when nothing is left.
    """
    raw_scores = as_mapping(raw_scores)
    total = 0.0
    weight_sum = 0.0

    for key, raw_weight in as_mapping(weights).items():
        weight = to_number(raw_weight)
        if weight is None or weight <= 0:
            continue
        value = to_number(raw_scores.get(key))
        if value is None:
            continue
        total += value * weight
        weight_sum += weight

    if weight_sum <= 0:
        return 0.0
    return total / weight_sum


def _clamp(value: float, low: float, high: float) -> float:
    return float(max(low, min(high, value)))


def _to_pct(value: float, low: float, high: float) -> float:
    if high <= low:
        return 0.0
    return float(np.clip((value - low) / (high - low) * 100.0, 0.0, 100.0))


def compute_weighted_score(raw_scores: Any,
                           rules: Union[RuleSet, Dict[str, Any], None] = None) -> WeightedScore:
    """Clamp raw scores into the configured range, then weight and rescale.

    A category missing from ``raw_scores`` (or not numeric) counts as the
    bottom of the range.
    """
    rules = RuleSet.coerce(rules)
    low, high = rules.score_range
    weights = rules.weights
    raw_scores = as_mapping(raw_scores)

    clamped = {
        key: _clamp(to_number(raw_scores.get(key), low), low, high)
        for key in weights
    }
    avg = weighted_supplier_score(clamped, weights)

    return WeightedScore(
        avg=avg,
        pct=_to_pct(avg, low, high),
        range_min=low,
        range_max=high,
        weights=weights
    )


def score_breakdown(raw_scores: Any,
                    rules: Union[RuleSet, Dict[str, Any], None] = None) -> List[Dict[str, Any]]:
    """Per-category clamped value and its position in the range (0-100)."""
    rules = RuleSet.coerce(rules)
    low, high = rules.score_range
    raw_scores = as_mapping(raw_scores)

    rows = []
    for key in rules.weights:
        value = _clamp(to_number(raw_scores.get(key), low), low, high)
        rows.append({'category': key, 'value': value, 'pct': _to_pct(value, low, high)})
    return rows


def score_bom_health(kpis: Mapping[str, Any]) -> BomHealth:
    """Label a BOM snapshot from its supplier coverage.

    The missing-supplier rate picks the label. A snapshot that would be
    Healthy but has more than 30% high-criticality nodes is downgraded
    to Attention.
    """
    kpis = as_mapping(kpis)
    total = max(0.0, to_number(kpis.get('totalNodes'), 0.0))
    missing = max(0.0, to_number(kpis.get('missingSup'), 0.0))
    high = max(0.0, to_number(kpis.get('highCrit'), 0.0))

    if total == 0:
        return BomHealth(NO_DATA, HEALTH_HINTS[NO_DATA])

    missing_rate = missing / total
    high_rate = high / total

    if missing_rate <= HEALTHY_MAX_MISSING_RATE:
        if high_rate > HIGH_CRIT_RATE_LIMIT:
            return BomHealth(ATTENTION, HIGH_CRIT_HINT, missing_rate, high_rate)
        label = HEALTHY
    elif missing_rate <= ATTENTION_MAX_MISSING_RATE:
        label = ATTENTION
    else:
        label = AT_RISK

    logger.debug(f"BOM health {label}: missing rate {missing_rate:.3f}, high rate {high_rate:.3f}")
    return BomHealth(label, HEALTH_HINTS[label], missing_rate, high_rate)
