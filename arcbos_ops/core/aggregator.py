"""Dataset-level summaries built from the index, validator and scorer."""

import logging
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from ..config.settings import RuleSet
from ..utils.records import as_list, to_text
from .scorer import BomHealth, compute_weighted_score, score_bom_health
from .validator import BOM_NODE, ERROR, PART, SUPPLIER, WARN, RecordValidator, summarize
from .xref import CrossReferenceIndex, change_id

logger = logging.getLogger(__name__)

HIGH_CRITICALITY = ('high', 'critical')
ECO_APPROVED_STATUSES = ('Approved', 'Implemented')
CLOSED_STATUS = 'Closed'
UNSPECIFIED_TAG = 'Unspecified'


def parse_dates(values: List[Any]) -> pd.Series:
    """ISO-8601 strings to UTC timestamps; anything unparsable becomes NaT."""
    return pd.to_datetime(pd.Series(values, dtype=object), errors='coerce', utc=True, format='ISO8601')


def to_timestamp(value: Any) -> Optional[pd.Timestamp]:
    if value is None or value == '':
        return None
    stamp = parse_dates([value]).iloc[0]
    return None if pd.isna(stamp) else stamp


class DatasetAggregator:
    """Combine per-record results into the views presentation consumes.

    Args:
        index: Cross-reference index over one dataset snapshot
        rules: Rule configuration, raw dict or RuleSet
    """

    def __init__(self, index: CrossReferenceIndex, rules: Union[RuleSet, Dict[str, Any], None] = None):
        self.index = index
        self.rules = RuleSet.coerce(rules)

    def bom_kpis(self) -> Dict[str, int]:
        nodes = self.index.bom_nodes
        high_crit = sum(1 for n in nodes if to_text(n.get('criticality')).lower() in HIGH_CRITICALITY)
        missing_sup = sum(1 for n in nodes if not as_list(n.get('suppliers')))
        return {'totalNodes': len(nodes), 'highCrit': high_crit, 'missingSup': missing_sup}

    def bom_health(self) -> BomHealth:
        return score_bom_health(self.bom_kpis())

    def supplier_rows(self) -> List[Dict[str, Any]]:
        """Suppliers in dataset order, each with its score and coverage."""
        rows = []
        for supplier in self.index.suppliers:
            score = compute_weighted_score(supplier.get('scores'), self.rules)
            supplier_id = to_text(supplier.get('supplierId'))
            rows.append({
                'supplierId': supplier_id,
                'name': to_text(supplier.get('name')),
                'region': to_text(supplier.get('region')),
                'status': to_text(supplier.get('status')),
                'riskTags': [to_text(t) for t in as_list(supplier.get('riskTags'))],
                'avg': score.avg,
                'pct': score.pct,
                'suppliedCount': len(self.index.supplied_skus(supplier_id)),
            })
        return rows

    def top_suppliers(self, limit: int = 5) -> List[Dict[str, Any]]:
        """Highest scoring suppliers; equal scores keep dataset order."""
        rows = self.supplier_rows()
        if not rows:
            return []

        df = pd.DataFrame({'pct': [r['pct'] for r in rows]})
        order = df.sort_values('pct', ascending=False, kind='mergesort').index[:limit]
        return [rows[i] for i in order]

    def key_risks(self, limit: int = 6) -> List[Dict[str, Any]]:
        """Supplier and part risk tags by occurrence, most frequent first."""
        tags = []
        for record in list(self.index.suppliers) + list(self.index.parts):
            tags.extend(to_text(t) or UNSPECIFIED_TAG for t in as_list(record.get('riskTags')))

        if not tags:
            return []

        series = pd.Series(tags, dtype=object)
        counts = series.groupby(series, sort=False).size()
        counts = counts.sort_values(ascending=False, kind='mergesort').head(limit)
        return [{'tag': tag, 'count': int(count)} for tag, count in counts.items()]

    def reference_date(self, as_of: Any = None) -> pd.Timestamp:
        """The 'now' for change windows: as_of, else rules meta lastUpdated, else today."""
        for candidate in (as_of, self.rules.last_updated):
            stamp = to_timestamp(candidate)
            if stamp is not None:
                return stamp
        return pd.Timestamp.now(tz='UTC')

    def change_activity(self, as_of: Any = None, window_days: int = 7) -> Dict[str, Any]:
        """Counts of new changes and approved ECOs dated within [as_of - window, as_of].

        Open ECRs are counted across the whole dataset, not just the window.
        """
        changes = self.index.changes
        reference = self.reference_date(as_of)
        since = reference - pd.Timedelta(days=window_days)

        dates = parse_dates([c.get('date') for c in changes])
        new_changes = 0
        eco_approved = 0
        for change, stamp in zip(changes, dates):
            if pd.isna(stamp) or stamp < since or stamp > reference:
                continue
            new_changes += 1
            if to_text(change.get('type')) == 'ECO' and to_text(change.get('status')) in ECO_APPROVED_STATUSES:
                eco_approved += 1

        open_ecr = sum(
            1 for c in changes
            if to_text(c.get('type')) == 'ECR' and to_text(c.get('status')) != CLOSED_STATUS
        )

        return {
            'since': since.isoformat(),
            'asOf': reference.isoformat(),
            'windowDays': window_days,
            'newChanges': new_changes,
            'ecoApproved': eco_approved,
            'openEcr': open_ecr,
        }

    def recent_changes(self, limit: int = 6) -> List[Dict[str, Any]]:
        """Most recent changes with a parsable date, newest first."""
        changes = self.index.changes
        if not changes:
            return []

        df = pd.DataFrame({'date': parse_dates([c.get('date') for c in changes])})
        df = df.dropna().sort_values('date', ascending=False, kind='mergesort')
        return [changes[i] for i in df.index[:limit]]

    def supplier_profile(self, supplier_id: Any) -> Optional[Dict[str, Any]]:
        supplier = self.index.supplier(supplier_id)
        if supplier is None:
            return None

        skus = sorted(self.index.supplied_skus(supplier_id))
        score = compute_weighted_score(supplier.get('scores'), self.rules)
        return {
            'supplier': supplier,
            'score': score.to_dict(),
            'suppliedSkus': [
                {
                    'sku': sku,
                    'bomNodes': len(self.index.nodes_for_sku(sku)),
                    'changes': [change_id(c) for c in self.index.changes_by_sku(sku)],
                }
                for sku in skus
            ],
            'suppliedCount': len(skus),
        }

    def validation_summary(self, max_items: int = 8) -> Dict[str, Dict[str, Any]]:
        validator = RecordValidator(self.rules, self.index)
        datasets = {
            'parts': (PART, self.index.parts),
            'bom': (BOM_NODE, self.index.bom_nodes),
            'suppliers': (SUPPLIER, self.index.suppliers),
        }

        summary = {}
        for name, (kind, records) in datasets.items():
            result = validator.validate_batch(kind, records, batch_id=name)
            summary[name] = {
                'totalRows': result.total_rows,
                'validRows': result.valid_rows,
                'qualityScore': result.quality_score,
                'errors': result.count(ERROR),
                'warnings': result.count(WARN),
                'topIssues': [i.to_dict() for i in summarize(result.issues, max_items)],
            }
        return summary

    def build_report(self, as_of: Any = None, window_days: int = 7) -> Dict[str, Any]:
        """Everything the dashboard shows, as one JSON-serialisable dict."""
        kpis = self.bom_kpis()
        report = {
            'bom': {'kpis': kpis, 'health': score_bom_health(kpis).to_dict()},
            'topSuppliers': self.top_suppliers(),
            'keyRisks': self.key_risks(),
            'changeActivity': self.change_activity(as_of, window_days),
            'recentChanges': self.recent_changes(),
            'validation': self.validation_summary(),
        }

        logger.info(f"Report built: {kpis['totalNodes']} BOM nodes, "
                    f"health {report['bom']['health']['label']}, "
                    f"{len(self.index.suppliers)} suppliers")
        return report
