import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Callable, Optional

from pydantic import ValidationError

from healthscan.errors import KnowledgeBaseError
from healthscan.ingredients_logic.ingredient_matcher import fold
from healthscan.models import IngredientRecord, RiskLevel

logger = logging.getLogger(__name__)


def coerce_record(item, position: int) -> Optional[IngredientRecord]:
    """IngredientRecord for a table entry, or None (with a warning) if it is malformed."""
    if isinstance(item, IngredientRecord):
        return item
    if isinstance(item, Mapping):
        try:
            return IngredientRecord.model_validate(dict(item))
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            logger.warning(f"Skipping malformed ingredient record #{position} (invalid: {', '.join(fields)})")
            return None
    logger.warning(f"Skipping ingredient record #{position}: unsupported type {type(item).__name__}")
    return None


class KnowledgeBase:
    """Read-only, ordered snapshot of the ingredient table."""

    def __init__(self, records=()):
        if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
            raise KnowledgeBaseError(
                f"Ingredient table must be a sequence of records, got {type(records).__name__}"
            )
        usable = []
        for position, item in enumerate(records):
            record = coerce_record(item, position)
            if record is not None:
                usable.append(record)
        self._records = tuple(usable)

    @classmethod
    def of(cls, source) -> "KnowledgeBase":
        if isinstance(source, cls):
            return source
        return cls(source)

    @property
    def records(self) -> tuple[IngredientRecord, ...]:
        return self._records

    def __iter__(self):
        return iter(self._records)

    def __len__(self):
        return len(self._records)

    def __getitem__(self, index):
        return self._records[index]

    def __repr__(self):
        return f"KnowledgeBase({len(self._records)} ingredients)"

    def get(self, ingredient_id: str) -> Optional[IngredientRecord]:
        for record in self._records:
            if record.id == ingredient_id:
                return record
        return None

    def filter(self, search: str = "", risk_level: str = "", category: str = "") -> list[IngredientRecord]:
        """
        Catalogue browsing: substring search over name and alternative names,
        risk level (English aliases accepted) and exact category. Empty filters
        match everything.
        """
        term = fold(search)
        wanted_level = RiskLevel.parse(risk_level)

        def matches_search(record):
            if not term:
                return True
            if term in fold(record.name):
                return True
            return any(term in fold(alt) for alt in record.alternative_names)

        def matches_level(record):
            if not risk_level:
                return True
            # Levels outside the known vocabulary only match verbatim.
            if wanted_level is None:
                return record.risk_level == risk_level
            return record.level is wanted_level

        return [
            record for record in self._records
            if matches_search(record)
            and matches_level(record)
            and (not category or record.category == category)
        ]


class KnowledgeBaseStore:
    """
    Holds the current snapshot. Reloads publish a new snapshot; callers that
    already took one keep using it.
    """

    def __init__(self, snapshot: Optional[KnowledgeBase] = None, loader: Optional[Callable[[], KnowledgeBase]] = None):
        self._snapshot = snapshot if snapshot is not None else KnowledgeBase()
        self._loader = loader
        self._lock = threading.Lock()

    def current(self) -> KnowledgeBase:
        return self._snapshot

    def publish(self, snapshot: KnowledgeBase) -> KnowledgeBase:
        snapshot = KnowledgeBase.of(snapshot)
        with self._lock:
            self._snapshot = snapshot
        logger.info(f"Published ingredient table with {len(snapshot)} ingredients")
        return snapshot

    def reload(self) -> KnowledgeBase:
        if self._loader is None:
            return self._snapshot
        return self.publish(self._loader())
