"""Core components: cross-reference index, validator, scorer, aggregator."""

from .xref import CrossReferenceIndex
from .validator import Issue, RecordValidator, ValidationResult, summarize, validate
from .scorer import compute_weighted_score, score_bom_health, weighted_supplier_score
from .aggregator import DatasetAggregator
from .data_loader import DataLoader, Snapshot

__all__ = [
    "CrossReferenceIndex",
    "Issue",
    "RecordValidator",
    "ValidationResult",
    "summarize",
    "validate",
    "compute_weighted_score",
    "score_bom_health",
    "weighted_supplier_score",
    "DatasetAggregator",
    "DataLoader",
    "Snapshot",
]
