import logging
import re
from typing import Callable, NamedTuple, Optional, Sequence

from healthscan.ingredients_logic.ingredient_parser import strip_accents
from healthscan.models import IngredientRecord

logger = logging.getLogger(__name__)

E_NUMBER_SHAPE_RE = re.compile(r"^e\d{3,4}$", re.IGNORECASE)


def fold(text: Optional[str]) -> str:
    """Lower-case, accent-free form used on both sides of every comparison."""
    if not text:
        return ""
    return strip_accents(text).casefold().strip()


def matches_name(term: str, record: IngredientRecord) -> bool:
    return fold(record.name) == term


def matches_alternative_name(term: str, record: IngredientRecord) -> bool:
    return any(fold(alt) == term for alt in record.alternative_names)


def matches_partial_name(term: str, record: IngredientRecord) -> bool:
    name = fold(record.name)
    return bool(name) and (term in name or name in term)


def matches_e_number(term: str, record: IngredientRecord) -> bool:
    return fold(record.e_number) == term


def is_e_number(term: str) -> bool:
    return bool(E_NUMBER_SHAPE_RE.match(term))


def always(term: str) -> bool:
    return True


class MatchTier(NamedTuple):
    name: str
    predicate: Callable[[str, IngredientRecord], bool]
    applies: Callable[[str], bool] = always


# Evaluated in order; inside a tier the first record in table order wins.
MATCH_TIERS = (
    MatchTier("name", matches_name),
    MatchTier("alternative_name", matches_alternative_name),
    MatchTier("partial_name", matches_partial_name),
    MatchTier("e_number", matches_e_number, is_e_number),
)


def find_in_tier(tier: MatchTier, term: str, records: Sequence[IngredientRecord]) -> Optional[IngredientRecord]:
    if not tier.applies(term):
        return None
    for record in records:
        if not record.name:
            continue
        if tier.predicate(term, record):
            return record
    return None


def find_matching_ingredient(detected_name: str, records: Sequence[IngredientRecord]) -> Optional[IngredientRecord]:
    """
    Resolve one candidate against the ingredient table.
    Tiers: exact name, alternative name, substring either way, E-number.
    Returns None when every tier fails.
    """
    term = fold(detected_name)
    if not term:
        return None

    for tier in MATCH_TIERS:
        match = find_in_tier(tier, term, records)
        if match is not None:
            logger.debug(f"'{detected_name}' matched '{match.name}' by {tier.name}")
            return match

    logger.debug(f"'{detected_name}' not found in ingredient table")
    return None
