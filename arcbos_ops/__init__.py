"""ARCBOS Ops core.

Rule-driven validation, weighted supplier scoring and cross-referencing
for engineering records: parts, BOM nodes, suppliers and change records.
"""

from .core.xref import CrossReferenceIndex
from .core.validator import Issue, RecordValidator, summarize, validate
from .core.scorer import compute_weighted_score, score_bom_health, weighted_supplier_score
from .core.aggregator import DatasetAggregator
from .core.data_loader import DataLoader

__version__ = "1.0.0"
__all__ = [
    "CrossReferenceIndex",
    "Issue",
    "RecordValidator",
    "summarize",
    "validate",
    "compute_weighted_score",
    "score_bom_health",
    "weighted_supplier_score",
    "DatasetAggregator",
    "DataLoader",
    "build_report",
]

def build_report(parts=None, bom=None, suppliers=None, changes=None, rules=None, as_of=None):
    """Convenience function to build the dashboard report from raw documents.
    
    Args:
        parts, bom, suppliers, changes: Parsed JSON, bare lists or wrapped containers
        rules: Optional rule configuration; bundled defaults when omitted
        as_of: Optional reference date for the change window
        
    Returns:
        Report dictionary ready for JSON serialisation
    """
    from .config.settings import get_default_rules
    
    index = CrossReferenceIndex.build(parts, bom, suppliers, changes)
    aggregator = DatasetAggregator(index, rules if rules is not None else get_default_rules())
    return aggregator.build_report(as_of=as_of)
