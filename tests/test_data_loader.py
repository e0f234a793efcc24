"""Tests for data loader functionality."""

import json

import pytest
from arcbos_ops import DataLoader

def write_json(path, payload):
    path.write_text(json.dumps(payload), encoding='utf-8')

class TestDataLoader:
    
    @pytest.fixture
    def data_dir(self, tmp_path):
        """Data directory mixing the accepted container shapes"""
        write_json(tmp_path / 'rules.json', {'revision': {'pattern': '^[A-Z]$'}})
        write_json(tmp_path / 'parts.json', {'items': [{'sku': 'SB1-PRT-001'}, 'junk']})
        write_json(tmp_path / 'bom.json', [{'nodeId': 'N-1', 'sku': 'SB1-PRT-001'}])
        write_json(tmp_path / 'suppliers.json', {'SUP-1': {'supplierId': 'SUP-1'}})
        write_json(tmp_path / 'changes.json', {'meta': {'count': 1}, 'changes': [{'changeId': 'ECR-1'}]})
        return tmp_path
    
    def test_init_defaults(self):
        loader = DataLoader()
        
        assert str(loader.data_dir) == 'data'
        assert loader.strict is False
    
    def test_load_all(self, data_dir):
        snapshot = DataLoader(data_dir).load_all()
        
        assert snapshot.rules == {'revision': {'pattern': '^[A-Z]$'}}
        assert snapshot.parts == [{'sku': 'SB1-PRT-001'}]
        assert snapshot.bom == [{'nodeId': 'N-1', 'sku': 'SB1-PRT-001'}]
        assert snapshot.suppliers == [{'supplierId': 'SUP-1'}]
        assert snapshot.changes == [{'changeId': 'ECR-1'}]
    
    def test_build_index_from_snapshot(self, data_dir):
        index = DataLoader(data_dir).load_all().build_index()
        
        assert index.has_supplier('SUP-1')
        assert len(index.nodes_for_sku('SB1-PRT-001')) == 1
    
    def test_missing_dataset_is_empty(self, data_dir):
        (data_dir / 'changes.json').unlink()
        
        assert DataLoader(data_dir).load_dataset('changes') == []
    
    def test_missing_dataset_strict(self, data_dir):
        (data_dir / 'changes.json').unlink()
        
        with pytest.raises(FileNotFoundError):
            DataLoader(data_dir, strict=True).load_dataset('changes')
    
    def test_unknown_dataset(self, data_dir):
        with pytest.raises(ValueError, match="Unknown dataset"):
            DataLoader(data_dir).load_dataset('invoices')
    
    def test_malformed_json(self, data_dir):
        (data_dir / 'bom.json').write_text('{"nodes": [', encoding='utf-8')
        
        with pytest.raises(ValueError, match="Malformed JSON"):
            DataLoader(data_dir).load_dataset('bom')
    
    def test_unrecognised_shape_is_empty(self, data_dir):
        write_json(data_dir / 'parts.json', {'count': 3})
        
        assert DataLoader(data_dir).load_dataset('parts') == []
    
    def test_yaml_rules(self, data_dir):
        (data_dir / 'rules.json').unlink()
        (data_dir / 'rules.yaml').write_text("revision:\n  pattern: '^[0-9]+$'\n", encoding='utf-8')
        
        rules = DataLoader(data_dir).load_rules()
        
        assert rules['revision']['pattern'] == '^[0-9]+$'
    
    def test_malformed_rules(self, data_dir):
        (data_dir / 'rules.json').write_text('{nope', encoding='utf-8')
        
        with pytest.raises(ValueError, match="Malformed rule configuration"):
            DataLoader(data_dir).load_rules()
    
    def test_missing_rules_fall_back_to_defaults(self, data_dir):
        (data_dir / 'rules.json').unlink()
        
        rules = DataLoader(data_dir).load_rules()
        
        assert 'supplierScoring' in rules
    
    def test_missing_rules_strict(self, data_dir):
        (data_dir / 'rules.json').unlink()
        
        with pytest.raises(FileNotFoundError):
            DataLoader(data_dir, strict=True).load_rules()
