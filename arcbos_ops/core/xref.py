"""Cross-reference index joining parts, BOM nodes, suppliers and changes."""

import logging
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from ..utils.records import as_list, as_records, to_text

logger = logging.getLogger(__name__)


def change_id(change: Dict[str, Any]) -> str:
    """Change records carry their id as ``changeId`` or ``id``."""
    return to_text(change.get('changeId')) or to_text(change.get('id'))


class CrossReferenceIndex:
    """Lookup structures over one snapshot of the four datasets.

    The index is built in a single pass and never mutated afterwards;
    a new snapshot means a new index. Malformed records are skipped
    rather than rejected: a record without an identifier simply does
    not appear in the maps keyed by that identifier.
    """

    def __init__(self, parts: Any = None, bom: Any = None,
                 suppliers: Any = None, changes: Any = None):
        self._parts = tuple(as_records(parts))
        self._nodes = tuple(as_records(bom))
        self._suppliers = tuple(as_records(suppliers))
        self._changes = tuple(as_records(changes))

        supplied: Dict[str, set] = {}
        suppliers_by_sku: Dict[str, set] = {}
        nodes_by_sku: Dict[str, List[Dict[str, Any]]] = {}
        parts_by_sku: Dict[str, Dict[str, Any]] = {}
        suppliers_by_id: Dict[str, Dict[str, Any]] = {}

        def add_supply(supplier_id: Any, sku: Any):
            sid = to_text(supplier_id)
            key = to_text(sku)
            if not sid or not key:
                return
            supplied.setdefault(sid, set()).add(key)
            suppliers_by_sku.setdefault(key, set()).add(sid)

        for part in self._parts:
            sku = to_text(part.get('sku'))
            if sku:
                parts_by_sku.setdefault(sku, part)
            for sid in as_list(part.get('preferredSuppliers')):
                add_supply(sid, sku)

        for node in self._nodes:
            sku = to_text(node.get('sku'))
            if sku:
                nodes_by_sku.setdefault(sku, []).append(node)
            for sid in as_list(node.get('suppliers')):
                add_supply(sid, sku)

        for supplier in self._suppliers:
            sid = to_text(supplier.get('supplierId'))
            if sid:
                suppliers_by_id.setdefault(sid, supplier)

        self._supplied = MappingProxyType({k: frozenset(v) for k, v in supplied.items()})
        self._suppliers_by_sku = MappingProxyType(
            {k: frozenset(v) for k, v in suppliers_by_sku.items()})
        self._nodes_by_sku = MappingProxyType({k: tuple(v) for k, v in nodes_by_sku.items()})
        self._parts_by_sku = MappingProxyType(parts_by_sku)
        self._suppliers_by_id = MappingProxyType(suppliers_by_id)

        logger.debug(f"Built cross-reference index: {len(self._parts)} parts, "
                     f"{len(self._nodes)} BOM nodes, {len(self._suppliers)} suppliers, "
                     f"{len(self._changes)} changes")

    @classmethod
    def build(cls, parts: Any = None, bom: Any = None,
              suppliers: Any = None, changes: Any = None) -> "CrossReferenceIndex":
        return cls(parts=parts, bom=bom, suppliers=suppliers, changes=changes)

    @property
    def parts(self) -> Tuple[Dict[str, Any], ...]:
        return self._parts

    @property
    def bom_nodes(self) -> Tuple[Dict[str, Any], ...]:
        return self._nodes

    @property
    def suppliers(self) -> Tuple[Dict[str, Any], ...]:
        return self._suppliers

    @property
    def changes(self) -> Tuple[Dict[str, Any], ...]:
        return self._changes

    @property
    def supplied_skus_by_supplier(self) -> Mapping[str, FrozenSet[str]]:
        """supplierId -> SKUs named in preferredSuppliers or BOM node suppliers."""
        return self._supplied

    @property
    def bom_nodes_by_sku(self) -> Mapping[str, Tuple[Dict[str, Any], ...]]:
        return self._nodes_by_sku

    def supplied_skus(self, supplier_id: Any) -> FrozenSet[str]:
        return self._supplied.get(to_text(supplier_id), frozenset())

    def suppliers_for_sku(self, sku: Any) -> FrozenSet[str]:
        """Supplier IDs that supply the SKU."""
        return self._suppliers_by_sku.get(to_text(sku), frozenset())

    def nodes_for_sku(self, sku: Any) -> Tuple[Dict[str, Any], ...]:
        return self._nodes_by_sku.get(to_text(sku), ())

    def changes_by_sku(self, sku: Any) -> List[Dict[str, Any]]:
        """Changes whose affectedSkus contain the SKU, newest first.

        Dates are ISO-8601 strings, so comparing them as text orders
        them chronologically. Changes sharing a date keep dataset order.
        """
        key = to_text(sku)
        if not key:
            return []

        related = [
            c for c in self._changes
            if key in {to_text(s) for s in as_list(c.get('affectedSkus'))}
        ]
        return sorted(related, key=lambda c: to_text(c.get('date')), reverse=True)

    def part(self, sku: Any) -> Optional[Dict[str, Any]]:
        return self._parts_by_sku.get(to_text(sku))

    def supplier(self, supplier_id: Any) -> Optional[Dict[str, Any]]:
        return self._suppliers_by_id.get(to_text(supplier_id))

    def has_part(self, sku: Any) -> bool:
        return to_text(sku) in self._parts_by_sku

    def has_supplier(self, supplier_id: Any) -> bool:
        return to_text(supplier_id) in self._suppliers_by_id
