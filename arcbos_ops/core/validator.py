"""Rule-driven validation for parts, BOM nodes, suppliers and changes."""

import logging
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Union

from ..config.settings import RuleSet
from ..utils.records import as_list, as_mapping, format_number, to_number, to_text
from .xref import CrossReferenceIndex, change_id

logger = logging.getLogger(__name__)

ERROR = 'error'
WARN = 'warn'
INFO = 'info'

SEVERITY_RANK = {ERROR: 3, WARN: 2, INFO: 1}

PART = 'Part'
BOM_NODE = 'BomNode'
SUPPLIER = 'Supplier'
CHANGE = 'Change'

KIND_ALIASES = {
    'part': PART,
    'parts': PART,
    'bomnode': BOM_NODE,
    'bom_node': BOM_NODE,
    'bom': BOM_NODE,
    'node': BOM_NODE,
    'supplier': SUPPLIER,
    'suppliers': SUPPLIER,
    'change': CHANGE,
    'changes': CHANGE,
}

# kind -> (rule section, display label, identifier field)
KIND_INFO = {
    PART: ('parts', 'Part', 'sku'),
    BOM_NODE: ('bom', 'BOM Node', 'nodeId'),
    SUPPLIER: ('suppliers', 'Supplier', 'supplierId'),
    CHANGE: ('changes', 'Change', 'changeId'),
}

RulesLike = Union[RuleSet, Dict[str, Any], None]


@dataclass(frozen=True)
class Issue:
    """A single validation finding."""
    level: str
    code: str
    message: str
    field: Optional[str] = None
    details: Optional[str] = None
    context: Optional[str] = None

    @property
    def title(self) -> str:
        return f"{(self.level or INFO).upper()} • {self.code or 'ISSUE'} • {self.message or ''}"

    @property
    def meta(self) -> str:
        parts = [self.context, f"field={self.field}" if self.field else "", self.details]
        return " • ".join(p for p in parts if p)

    def with_context(self, context: str) -> "Issue":
        return replace(self, context=context)

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ValidationResult:
    """Results of validating a batch of records."""
    is_valid: bool
    total_rows: int
    valid_rows: int
    issues: List[Issue] = field(default_factory=list)
    quality_score: float = 100.0

    def count(self, level: str) -> int:
        return sum(1 for i in self.issues if i.level == level)


def resolve_kind(kind: Any) -> Optional[str]:
    """Map 'part', 'bom_node', 'Supplier' ... to a canonical kind name."""
    if not isinstance(kind, str):
        return None
    if kind in KIND_INFO:
        return kind
    return KIND_ALIASES.get(kind.strip().lower().replace('-', '_'))


def validate_required(record: Dict[str, Any], fields: Iterable[str], context: str = "") -> List[Issue]:
    issues = []
    for name in fields:
        if not to_text(record.get(name)):
            issues.append(Issue(ERROR, 'REQUIRED_MISSING', 'Missing required field',
                                field=name, context=context or None))
    return issues


def validate_sku_layer(sku: Any, rules: RuleSet) -> List[Issue]:
    """The layer is the second hyphen-delimited token: SB1-<LAYER>-..."""
    text = to_text(sku)
    if not text:
        return [Issue(ERROR, 'SKU_EMPTY', 'SKU is empty', field='sku')]

    tokens = text.split('-')
    layer = tokens[1].strip() if len(tokens) >= 2 else ''
    if not layer:
        return [Issue(ERROR, 'SKU_LAYER_MISSING',
                      'SKU layer token is missing (expected <prefix>-<LAYER>-...)',
                      field='sku', details=f"sku={text}")]

    allowed = rules.allowed_layers
    if allowed and layer not in allowed:
        return [Issue(ERROR, 'SKU_LAYER_INVALID', 'SKU layer is not allowed by the rules',
                      field='sku',
                      details=f"layer={layer} allowed={'|'.join(to_text(a) for a in allowed)}")]
    return []


def validate_revision(revision: Any, rules: RuleSet) -> List[Issue]:
    text = to_text(revision)
    if not text:
        return [Issue(ERROR, 'REV_EMPTY', 'Revision is empty', field='revision')]

    compiled, error = rules.compiled_revision_pattern()
    if compiled is None:
        return [Issue(ERROR, 'REV_RULE_INVALID', 'Revision rule pattern is invalid',
                      field='revision', details=error)]

    if not compiled.fullmatch(text):
        return [Issue(ERROR, 'REV_FORMAT', 'Revision does not match the rule pattern',
                      field='revision', details=f"rev={text} pattern={compiled.pattern}")]
    return []


def validate_status(status: Any, allowed: List[Any], invalid_code: str = 'STATUS_INVALID') -> List[Issue]:
    text = to_text(status)
    if not text:
        return [Issue(ERROR, 'STATUS_EMPTY', 'Status is empty', field='status')]

    if allowed and text not in allowed:
        return [Issue(ERROR, invalid_code, 'Status is not an allowed value',
                      field='status',
                      details=f"status={text} allowed={'|'.join(to_text(a) for a in allowed)}")]
    return []


def validate_alternates(part: Dict[str, Any], rules: RuleSet,
                        index: Optional[CrossReferenceIndex] = None) -> List[Issue]:
    issues = []
    allowed = rules.interchangeability
    check_known = index is not None and bool(index.parts)

    for i, alt in enumerate(as_list(part.get('alternates'))):
        alt = as_mapping(alt)
        sku = to_text(alt.get('sku'))
        if not sku:
            issues.append(Issue(ERROR, 'ALT_SKU_EMPTY', 'Alternate SKU is empty',
                                field=f"alternates[{i}].sku", details=f"index={i}"))
        elif check_known and not index.has_part(sku):
            issues.append(Issue(INFO, 'ALT_SKU_UNKNOWN', 'Alternate SKU has no part record',
                                field=f"alternates[{i}].sku", details=f"index={i} sku={sku}"))

        value = alt.get('interchangeability')
        if not isinstance(value, str) or value not in allowed:
            issues.append(Issue(ERROR, 'ALT_INTERCHANGE_INVALID',
                                'Alternate interchangeability is invalid',
                                field=f"alternates[{i}].interchangeability",
                                details=f"index={i} value={to_text(value)}"))
    return issues


def _unknown_suppliers(supplier_ids: Iterable[Any], index: Optional[CrossReferenceIndex],
                       code: str, field_name: str) -> List[Issue]:
    if index is None or not index.suppliers:
        return []
    issues = []
    for sid in supplier_ids:
        text = to_text(sid)
        if text and not index.has_supplier(text):
            issues.append(Issue(WARN, code, 'Supplier ID is not in the supplier list',
                                field=field_name, details=f"supplierId={text}"))
    return issues


def validate_part(part: Dict[str, Any], rules: RuleSet,
                  index: Optional[CrossReferenceIndex] = None) -> List[Issue]:
    issues = validate_required(part, rules.required_fields('parts'), 'Part')
    issues += validate_sku_layer(part.get('sku'), rules)
    issues += validate_revision(part.get('revision'), rules)
    issues += validate_status(part.get('status'), rules.part_states)
    issues += validate_alternates(part, rules, index)
    issues += _unknown_suppliers(as_list(part.get('preferredSuppliers')), index,
                                 'PART_SUPPLIER_UNKNOWN', 'preferredSuppliers')
    return issues


def validate_bom_node(node: Dict[str, Any], rules: RuleSet,
                      index: Optional[CrossReferenceIndex] = None) -> List[Issue]:
    issues = validate_required(node, rules.required_fields('bom'), 'BOM Node')

    qty = to_number(node.get('qty'))
    if qty is None or qty <= 0:
        issues.append(Issue(ERROR, 'BOM_QTY_INVALID', 'BOM qty must be a positive number',
                            field='qty', details=f"qty={to_text(node.get('qty'))}"))

    criticality = node.get('criticality')
    allowed = rules.criticality
    if criticality and allowed and criticality not in allowed:
        issues.append(Issue(ERROR, 'BOM_CRIT_INVALID', 'Criticality is not allowed by the rules',
                            field='criticality', details=f"criticality={to_text(criticality)}"))

    issues += validate_sku_layer(node.get('sku'), rules)
    issues += validate_revision(node.get('revision'), rules)

    if index is not None and index.parts:
        sku = to_text(node.get('sku'))
        if sku and not index.has_part(sku):
            issues.append(Issue(WARN, 'BOM_SKU_UNKNOWN', 'BOM node SKU has no part record',
                                field='sku', details=f"sku={sku}"))

    issues += _unknown_suppliers(as_list(node.get('suppliers')), index,
                                 'BOM_SUPPLIER_UNKNOWN', 'suppliers')
    return issues


def validate_supplier(supplier: Dict[str, Any], rules: RuleSet,
                      index: Optional[CrossReferenceIndex] = None) -> List[Issue]:
    issues = validate_required(supplier, rules.required_fields('suppliers'), 'Supplier')
    issues += validate_status(supplier.get('status'), rules.supplier_statuses,
                              invalid_code='SUPPLIER_STATUS_INVALID')

    low, high = rules.score_range
    for key, raw in as_mapping(supplier.get('scores')).items():
        value = to_number(raw)
        if value is None or value < low or value > high:
            issues.append(Issue(ERROR, 'SUPPLIER_SCORE_RANGE', 'Supplier score out of range',
                                field=f"scores.{key}",
                                details=f"key={key} value={to_text(raw)} "
                                        f"range={format_number(low)}..{format_number(high)}"))
    return issues


def validate_change(change: Dict[str, Any], rules: RuleSet,
                    index: Optional[CrossReferenceIndex] = None) -> List[Issue]:
    return validate_required(change, rules.required_fields('changes'), 'Change')


VALIDATORS = {
    PART: validate_part,
    BOM_NODE: validate_bom_node,
    SUPPLIER: validate_supplier,
    CHANGE: validate_change,
}


def validate(kind: Any, record: Any, rules: RulesLike = None,
             index: Optional[CrossReferenceIndex] = None) -> List[Issue]:
    """Validate one record of the given kind.

    Args:
        kind: 'Part', 'BomNode', 'Supplier' or 'Change' (aliases accepted)
        record: The record as parsed from JSON; non-dicts validate as empty
        rules: Rule configuration, raw dict or RuleSet
        index: Optional cross-reference index enabling relational checks

    Returns:
        Issues in check order. Never raises for bad input.
    """
    canonical = resolve_kind(kind)
    if canonical is None:
        return [Issue(ERROR, 'KIND_UNKNOWN', 'Unknown record kind', details=f"kind={to_text(kind)}")]

    return VALIDATORS[canonical](as_mapping(record), RuleSet.coerce(rules), index)


def _issue_rank(issue: Any) -> int:
    level = issue.get('level') if isinstance(issue, dict) else getattr(issue, 'level', None)
    return SEVERITY_RANK.get(level, 0)


def summarize(issues: Iterable[Any], max_items: Any = 8) -> List[Any]:
    """Most severe issues first, original order kept within a severity."""
    limit = max_items if isinstance(max_items, int) and not isinstance(max_items, bool) else 8
    ranked = sorted(list(issues or []), key=_issue_rank, reverse=True)
    return ranked[:max(0, limit)]


def record_context(kind: str, record: Dict[str, Any]) -> str:
    _, label, id_field = KIND_INFO[kind]
    identifier = change_id(record) if kind == CHANGE else to_text(record.get(id_field))
    return f"{label} {identifier or '?'}"


class RecordValidator:
    """Validate whole datasets against one rule configuration."""

    def __init__(self, rules: RulesLike = None, index: Optional[CrossReferenceIndex] = None):
        self.rules = RuleSet.coerce(rules)
        self.index = index

    def validate(self, kind: Any, record: Any) -> List[Issue]:
        return validate(kind, record, self.rules, self.index)

    def validate_batch(self, kind: Any, records: Iterable[Any], batch_id: str = None) -> ValidationResult:
        """Validate a batch of records, tagging each issue with its record."""
        records = list(records or [])
        canonical = resolve_kind(kind)
        log_context = {'batch_id': batch_id, 'kind': canonical}
        logger.info(f"Validating batch {batch_id} with {len(records)} {kind} records", extra=log_context)

        if canonical is None:
            issues = validate(kind, {}, self.rules)
            return ValidationResult(is_valid=False, total_rows=len(records), valid_rows=0,
                                    issues=issues, quality_score=0.0)

        issues = []
        valid_rows = 0
        for record in records:
            record = as_mapping(record)
            found = validate(canonical, record, self.rules, self.index)
            context = record_context(canonical, record)
            issues.extend(i.with_context(context) for i in found)
            if not any(i.level == ERROR for i in found):
                valid_rows += 1

        result = ValidationResult(
            is_valid=valid_rows == len(records),
            total_rows=len(records),
            valid_rows=valid_rows,
            issues=issues,
            quality_score=self._calculate_quality_score(issues)
        )

        self._log_validation_results(result, log_context)
        return result

    def _calculate_quality_score(self, issues: List[Issue]) -> float:
        """Quality score (0-100) after per-issue deductions."""
        score = 100.0
        for issue in issues:
            if issue.level == ERROR:
                score -= 25
            elif issue.level == WARN:
                score -= 10
            elif issue.level == INFO:
                score -= 2
        return max(0.0, score)

    def _log_validation_results(self, result: ValidationResult, log_context: Dict[str, Any]):
        logger.info(f"Validation complete for batch {log_context['batch_id']}: "
                    f"Quality Score: {result.quality_score:.1f}/100, "
                    f"Valid Rows: {result.valid_rows}/{result.total_rows}",
                    extra=dict(log_context, quality_score=result.quality_score))

        for issue in result.issues:
            logger.debug(f"Validation issue: {issue.title} ({issue.meta})",
                         extra=dict(log_context, code=issue.code, severity=issue.level))
