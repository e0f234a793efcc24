"""Tests for dataset-level aggregation."""

import json

import pandas as pd
import pytest
from arcbos_ops import CrossReferenceIndex, DatasetAggregator, build_report
from arcbos_ops.config.settings import get_default_rules

class TestDatasetAggregator:
    
    @pytest.fixture
    def rules(self):
        rules = get_default_rules()
        rules['meta'] = {'lastUpdated': '2025-03-14'}
        return rules
    
    @pytest.fixture
    def index(self):
        parts = [
            {'sku': 'SB1-PRT-001', 'riskTags': ['Single source', '']},
            {'sku': 'SB1-PRT-002', 'riskTags': ['Long lead']},
        ]
        bom = [
            {'nodeId': 'N-1', 'sku': 'SB1-PRT-001', 'criticality': 'High', 'suppliers': ['SUP-A']},
            {'nodeId': 'N-2', 'sku': 'SB1-PRT-002', 'criticality': 'critical', 'suppliers': []},
            {'nodeId': 'N-3', 'sku': 'SB1-PRT-002', 'criticality': 'Low'},
            {'nodeId': 'N-4', 'sku': 'SB1-PRT-001', 'criticality': 'Medium', 'suppliers': ['SUP-B']},
        ]
        suppliers = [
            {'supplierId': 'SUP-A', 'name': 'Alpha', 'scores': {'quality': 3},
             'riskTags': ['Long lead', 'Single source']},
            {'supplierId': 'SUP-B', 'name': 'Bravo', 'scores': {k: 5 for k in (
                'quality', 'delivery', 'cost', 'engineeringSupport', 'compliance', 'risk')},
             'riskTags': ['Single source']},
            {'supplierId': 'SUP-C', 'name': 'Charlie', 'scores': {'quality': 3}},
        ]
        changes = [
            {'changeId': 'ECR-1', 'type': 'ECR', 'status': 'Open', 'date': '2025-03-10',
             'affectedSkus': ['SB1-PRT-001']},
            {'changeId': 'ECO-2', 'type': 'ECO', 'status': 'Implemented', 'date': '2025-03-12'},
            {'changeId': 'ECO-3', 'type': 'ECO', 'status': 'Approved', 'date': '2025-01-12'},
            {'changeId': 'ECR-4', 'type': 'ECR', 'status': 'Closed', 'date': '2025-03-13'},
            {'changeId': 'ECR-5', 'type': 'ECR', 'status': 'Open', 'date': 'not a date'},
        ]
        return CrossReferenceIndex.build(parts, bom, suppliers, changes)
    
    @pytest.fixture
    def aggregator(self, index, rules):
        return DatasetAggregator(index, rules)
    
    def test_bom_kpis(self, aggregator):
        assert aggregator.bom_kpis() == {'totalNodes': 4, 'highCrit': 2, 'missingSup': 2}
    
    def test_bom_health(self, aggregator):
        assert aggregator.bom_health().label == 'At risk'
    
    def test_top_suppliers_ranked_by_pct(self, aggregator):
        top = aggregator.top_suppliers()
        
        assert [s['supplierId'] for s in top] == ['SUP-B', 'SUP-A', 'SUP-C']
        assert top[0]['pct'] == pytest.approx(100.0)
        assert top[0]['suppliedCount'] == 1
    
    def test_top_suppliers_ties_keep_dataset_order(self, aggregator):
        top = aggregator.top_suppliers(limit=3)
        
        assert top[1]['pct'] == top[2]['pct']
        assert [s['name'] for s in top[1:]] == ['Alpha', 'Charlie']
    
    def test_top_suppliers_limit(self, aggregator):
        assert len(aggregator.top_suppliers(limit=1)) == 1
    
    def test_key_risks(self, aggregator):
        risks = aggregator.key_risks()
        
        assert risks == [
            {'tag': 'Single source', 'count': 3},
            {'tag': 'Long lead', 'count': 2},
            {'tag': 'Unspecified', 'count': 1},
        ]
    
    def test_key_risks_limit_and_empty(self, aggregator):
        assert len(aggregator.key_risks(limit=1)) == 1
        assert DatasetAggregator(CrossReferenceIndex.build()).key_risks() == []
    
    def test_change_activity_uses_rules_date(self, aggregator):
        activity = aggregator.change_activity()
        
        assert activity['newChanges'] == 3
        assert activity['ecoApproved'] == 1
        assert activity['openEcr'] == 2
        assert activity['asOf'].startswith('2025-03-14')
    
    def test_change_activity_window(self, aggregator):
        activity = aggregator.change_activity(as_of='2025-03-14', window_days=90)
        
        assert activity['newChanges'] == 4
        assert activity['ecoApproved'] == 2
    
    def test_reference_date_falls_back_to_now(self, index):
        aggregator = DatasetAggregator(index, {'meta': {'lastUpdated': 'whenever'}})
        
        reference = aggregator.reference_date()
        
        assert abs(reference - pd.Timestamp.now(tz='UTC')) < pd.Timedelta(minutes=5)
    
    def test_recent_changes(self, aggregator):
        recent = aggregator.recent_changes(limit=3)
        
        assert [c['changeId'] for c in recent] == ['ECR-4', 'ECO-2', 'ECR-1']
    
    def test_supplier_profile(self, aggregator):
        profile = aggregator.supplier_profile('SUP-A')
        
        assert profile['suppliedCount'] == 1
        assert profile['suppliedSkus'] == [
            {'sku': 'SB1-PRT-001', 'bomNodes': 2, 'changes': ['ECR-1']}
        ]
        assert profile['score']['rangeMax'] == 5
        assert aggregator.supplier_profile('SUP-Z') is None
    
    def test_validation_summary(self, aggregator):
        summary = aggregator.validation_summary(max_items=2)
        
        assert set(summary) == {'parts', 'bom', 'suppliers'}
        assert summary['suppliers']['totalRows'] == 3
        assert len(summary['parts']['topIssues']) == 2
        assert summary['parts']['topIssues'][0]['level'] == 'error'
    
    def test_build_report_is_json_serialisable(self, aggregator):
        report = aggregator.build_report()
        
        assert set(report) == {
            'bom', 'topSuppliers', 'keyRisks', 'changeActivity', 'recentChanges', 'validation'
        }
        json.dumps(report)
    
    def test_empty_snapshot(self):
        report = build_report()
        
        assert report['bom']['health']['label'] == 'No data'
        assert report['topSuppliers'] == []
        assert report['recentChanges'] == []
        assert report['changeActivity']['newChanges'] == 0
