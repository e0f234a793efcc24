"""Basic usage examples for the arcbos_ops package."""

import json
from pathlib import Path

from arcbos_ops import CrossReferenceIndex, DatasetAggregator, DataLoader, summarize, validate

DATA_DIR = Path(__file__).parent / "data"

def simple_example():
    """Validate a single record with the bundled rules."""
    print("=== Single Record Validation ===")
    
    part = {
        'sku': 'SB1-XXX-001',
        'revision': 'AB',
        'status': 'Released',
        'owner': 'mech',
        'date': '2025-02-01'
    }
    
    for issue in validate('Part', part):
        print(issue.title)
        print(f"    {issue.meta}")
    print()

def dataset_example():
    """Load the sample data directory and cross-reference it."""
    print("=== Cross-Reference Example ===")
    
    snapshot = DataLoader(DATA_DIR).load_all()
    index = CrossReferenceIndex.build(snapshot.parts, snapshot.bom, snapshot.suppliers, snapshot.changes)
    
    sku = 'SB1-PRT-101'
    print(f"Suppliers for {sku}: {sorted(index.suppliers_for_sku(sku))}")
    print(f"BOM nodes for {sku}: {[n['nodeId'] for n in index.nodes_for_sku(sku)]}")
    print(f"Changes for {sku}: {[c['changeId'] for c in index.changes_by_sku(sku)]}")
    print()
    
    issues = []
    for node in snapshot.bom:
        issues.extend(validate('BomNode', node, snapshot.rules, index))
    
    print("Top BOM issues:")
    for issue in summarize(issues, 5):
        print(f"  {issue.title}")
    print()
    
    return index

def report_example():
    """Build the full dashboard report."""
    print("=== Report Example ===")
    
    snapshot = DataLoader(DATA_DIR).load_all()
    aggregator = DatasetAggregator(snapshot.build_index(), snapshot.rules)
    report = aggregator.build_report()
    
    print(json.dumps({k: report[k] for k in ('bom', 'topSuppliers', 'keyRisks', 'changeActivity')},
                     indent=2))
    return report

if __name__ == "__main__":
    simple_example()
    dataset_example()
    report_example()
