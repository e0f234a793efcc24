"""Rule configuration loading and read-only access."""

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from ..utils.records import as_list, as_mapping, to_number, to_text

logger = logging.getLogger(__name__)

DEFAULT_REVISION_PATTERN = "^[A-Z]$"
DEFAULT_SCORE_RANGE = (1.0, 5.0)

DEFAULT_REQUIRED_FIELDS = {
    'parts': ['sku', 'revision', 'status', 'owner', 'date'],
    'bom': ['nodeId', 'sku', 'qty', 'unit', 'revision', 'criticality'],
    'suppliers': ['supplierId', 'name', 'region', 'status'],
    'changes': [],
}
DEFAULT_SUPPLIER_STATUS = ['Preferred', 'Approved', 'Conditional', 'Blocked']
DEFAULT_CRITICALITY = ['High', 'Medium', 'Low']
DEFAULT_INTERCHANGEABILITY = ['Drop-in', 'Requires ECO', 'Not Compatible']
DEFAULT_WEIGHTS = {
    'quality': 1,
    'delivery': 1,
    'cost': 1,
    'engineeringSupport': 1,
    'compliance': 1,
    'risk': 1,
}


def get_default_rules() -> Dict[str, Any]:
    """Get the default rule configuration."""
    config_dir = Path(__file__).parent

    # Try the bundled YAML first, fall back to the in-code tree
    try:
        with open(config_dir / 'rules.yaml', 'r') as f:
            rules = yaml.safe_load(f)
    except (FileNotFoundError, yaml.YAMLError):
        logger.warning("Bundled rules.yaml unavailable, using built-in defaults")
        rules = None

    if not isinstance(rules, dict):
        rules = _get_default_rules()

    return rules


def _get_default_rules() -> Dict[str, Any]:
    """Built-in rule tree."""
    return {
        'meta': {'lastUpdated': None},
        'parts': {'requiredFields': list(DEFAULT_REQUIRED_FIELDS['parts'])},
        'bom': {
            'requiredFields': list(DEFAULT_REQUIRED_FIELDS['bom']),
            'criticality': list(DEFAULT_CRITICALITY),
        },
        'suppliers': {
            'requiredFields': list(DEFAULT_REQUIRED_FIELDS['suppliers']),
            'status': list(DEFAULT_SUPPLIER_STATUS),
        },
        'changes': {'requiredFields': []},
        'supplierScoring': {
            'range': {'min': 1, 'max': 5},
            'weights': dict(DEFAULT_WEIGHTS),
        },
        'skuLayers': {'allowed': ['PLT', 'SUB', 'ASM', 'PRT', 'CON', 'TOL']},
        'revision': {'pattern': DEFAULT_REVISION_PATTERN},
        'statusMachine': {'states': ['Draft', 'In Review', 'Released', 'Obsolete']},
        'alternates': {'interchangeability': list(DEFAULT_INTERCHANGEABILITY)},
    }


def load_rules_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a rule configuration from a JSON or YAML file."""
    path = Path(config_path)
    with open(path, 'r', encoding='utf-8') as f:
        if path.suffix.lower() == '.json':
            rules = json.load(f)
        else:
            rules = yaml.safe_load(f)

    if not isinstance(rules, dict):
        raise ValueError(f"Rule configuration in {path} is not a mapping")
    return rules


@lru_cache(maxsize=64)
def compile_pattern(pattern: str) -> Tuple[Optional["re.Pattern"], Optional[str]]:
    """Compile a rule pattern once; returns (compiled, None) or (None, error)."""
    try:
        return re.compile(pattern), None
    except (re.error, OverflowError, RecursionError) as e:
        logger.debug(f"Invalid rule pattern {pattern!r}: {e}")
        return None, str(e)


class RuleSet:
    """Read-only view over a rule configuration tree.

    Every accessor tolerates missing or wrong-typed sections and falls
    back to the documented defaults, so validators and scorers never
    have to guard against a partial configuration.
    """

    def __init__(self, rules: Optional[Dict[str, Any]] = None):
        self.rules = rules if isinstance(rules, dict) else {}

    @classmethod
    def coerce(cls, rules: Union["RuleSet", Dict[str, Any], None]) -> "RuleSet":
        if isinstance(rules, RuleSet):
            return rules
        return cls(rules)

    def section(self, name: str) -> Dict[str, Any]:
        return as_mapping(self.rules.get(name))

    def _list(self, section: str, key: str, default: Optional[List[Any]] = None) -> List[Any]:
        value = self.section(section).get(key)
        if value is None:
            return list(default or [])
        return as_list(value)

    def required_fields(self, section: str) -> List[str]:
        return [to_text(f) for f in self._list(section, 'requiredFields',
                                               DEFAULT_REQUIRED_FIELDS.get(section))]

    @property
    def allowed_layers(self) -> List[str]:
        return self._list('skuLayers', 'allowed')

    @property
    def revision_pattern(self) -> Any:
        pattern = self.section('revision').get('pattern')
        if pattern is None or pattern == '':
            return DEFAULT_REVISION_PATTERN
        return pattern

    def compiled_revision_pattern(self) -> Tuple[Optional["re.Pattern"], Optional[str]]:
        pattern = self.revision_pattern
        if not isinstance(pattern, str):
            return None, f"pattern must be a string, got {type(pattern).__name__}"
        return compile_pattern(pattern)

    @property
    def part_states(self) -> List[str]:
        return self._list('statusMachine', 'states')

    @property
    def supplier_statuses(self) -> List[str]:
        return self._list('suppliers', 'status', DEFAULT_SUPPLIER_STATUS)

    @property
    def criticality(self) -> List[str]:
        return self._list('bom', 'criticality', DEFAULT_CRITICALITY)

    @property
    def interchangeability(self) -> List[str]:
        return self._list('alternates', 'interchangeability', DEFAULT_INTERCHANGEABILITY)

    @property
    def score_range(self) -> Tuple[float, float]:
        score_range = as_mapping(self.section('supplierScoring').get('range'))
        return (
            to_number(score_range.get('min'), DEFAULT_SCORE_RANGE[0]),
            to_number(score_range.get('max'), DEFAULT_SCORE_RANGE[1]),
        )

    @property
    def weights(self) -> Dict[str, Any]:
        weights = self.section('supplierScoring').get('weights')
        if not isinstance(weights, dict):
            return dict(DEFAULT_WEIGHTS)
        return weights

    @property
    def last_updated(self) -> Optional[str]:
        value = to_text(self.section('meta').get('lastUpdated'))
        return value or None
