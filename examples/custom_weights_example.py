"""Example of scoring suppliers with custom weights and ranges."""

from arcbos_ops import compute_weighted_score, weighted_supplier_score
from arcbos_ops.config import get_default_rules
from arcbos_ops.core.scorer import score_breakdown

def main():
    scores = {
        'quality': 4.5,
        'delivery': 3.0,
        'cost': 2.0,
        'engineeringSupport': 4.0,
        'compliance': 5.0,
        'risk': 3.5
    }
    
    # Default rules weight every category equally
    rules = get_default_rules()
    default = compute_weighted_score(scores, rules)
    print(f"Default weights: avg={default.avg:.2f} pct={default.pct:.1f}")
    
    # Quality-heavy weighting
    rules['supplierScoring']['weights'] = {
        'quality': 0.5,
        'delivery': 0.3,
        'cost': 0.2
    }
    quality_first = compute_weighted_score(scores, rules)
    print(f"Quality-first weights: avg={quality_first.avg:.2f} pct={quality_first.pct:.1f}")
    
    for row in score_breakdown(scores, rules):
        print(f"  {row['category']:<20} {row['value']:.1f} ({row['pct']:.0f}%)")
    
    # Unclamped weighted mean, as the dashboard list shows it
    raw = weighted_supplier_score(scores, rules['supplierScoring']['weights'])
    print(f"Unclamped weighted mean: {raw:.2f}")

if __name__ == "__main__":
    main()
