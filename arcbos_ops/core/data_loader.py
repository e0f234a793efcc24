"""Load rule configuration and datasets from a data directory."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from ..config.settings import get_default_rules, load_rules_file
from ..utils.records import as_records, unwrap_records
from .xref import CrossReferenceIndex

logger = logging.getLogger(__name__)

DATASET_FILES = {
    'parts': 'parts.json',
    'bom': 'bom.json',
    'suppliers': 'suppliers.json',
    'changes': 'changes.json',
}
RULES_CANDIDATES = ('rules.json', 'rules.yaml', 'rules.yml')


@dataclass
class Snapshot:
    """One load of the rule configuration and the four datasets."""
    rules: Dict[str, Any]
    parts: List[Dict[str, Any]] = field(default_factory=list)
    bom: List[Dict[str, Any]] = field(default_factory=list)
    suppliers: List[Dict[str, Any]] = field(default_factory=list)
    changes: List[Dict[str, Any]] = field(default_factory=list)

    def build_index(self) -> CrossReferenceIndex:
        return CrossReferenceIndex.build(self.parts, self.bom, self.suppliers, self.changes)


class DataLoader:
    """Read the JSON documents that make up one dataset snapshot."""

    def __init__(self, data_dir: Union[str, Path] = 'data', strict: bool = False):
        """Initialize data loader.

        Args:
            data_dir: Directory holding rules.json and the dataset files
            strict: Raise when a dataset file is missing instead of
                treating it as empty
        """
        self.data_dir = Path(data_dir)
        self.strict = strict

    def load_json(self, path: Union[str, Path]) -> Any:
        """Parse one JSON document, logging and re-raising failures."""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Malformed JSON in {path}: {e}")
            raise ValueError(f"Malformed JSON in {path}: {e}") from e

    def load_rules(self) -> Dict[str, Any]:
        """Load rules from the data directory, else the bundled defaults."""
        for name in RULES_CANDIDATES:
            path = self.data_dir / name
            if path.exists():
                try:
                    rules = load_rules_file(path)
                except (json.JSONDecodeError, yaml.YAMLError) as e:
                    logger.error(f"Malformed rule configuration in {path}: {e}")
                    raise ValueError(f"Malformed rule configuration in {path}: {e}") from e
                logger.info(f"Loaded rules from {path}")
                return rules

        if self.strict:
            raise FileNotFoundError(f"No rules file in {self.data_dir}")

        logger.warning(f"No rules file in {self.data_dir}, using bundled defaults")
        return get_default_rules()

    def load_dataset(self, name: str) -> List[Dict[str, Any]]:
        """Load one dataset by name and normalize its container shape."""
        if name not in DATASET_FILES:
            raise ValueError(f"Unknown dataset: {name}")

        path = self.data_dir / DATASET_FILES[name]
        if not path.exists():
            if self.strict:
                raise FileNotFoundError(f"Dataset file not found: {path}")
            logger.warning(f"Dataset file not found: {path}, treating as empty")
            return []

        doc = self.load_json(path)
        if unwrap_records(doc) is None:
            logger.warning(f"{path} holds no record list, treating as empty")

        records = as_records(doc)
        logger.info(f"Loaded {len(records)} {name} records from {path}")
        return records

    def load_all(self) -> Snapshot:
        rules = self.load_rules()
        datasets = {name: self.load_dataset(name) for name in DATASET_FILES}
        return Snapshot(rules=rules, **datasets)
