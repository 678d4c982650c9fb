"""
HealthScan Ingredient Parser
============================

Turns the raw text recognized off a product label into candidate
ingredient names:

- whitespace, quote and bracket cleanup
- allergen annotations in parentheses are dropped
- E-numbers are rewritten to their canonical form (e-250, E 250 -> E250)
- accents are folded for matching; the original text is kept for
  product category detection
- the labelled ingredient section is located and split on , and ;
"""

import logging
import re
import unicodedata

logger = logging.getLogger(__name__)

MIN_CANDIDATE_LENGTH = 3

QUOTE_CHARS = "\"'“”„«»‘’`´"
BRACKET_RE = re.compile(r"[\[\]{}]")
PARENTHESES_RE = re.compile(r"\([^)]*\)")
E_NUMBER_RE = re.compile(r"\be[\s-]?(\d{3,4})([a-z]?)\b", re.IGNORECASE)

# Tried in order; the first one that matches supplies the ingredient section.
SECTION_PATTERNS = [
    re.compile(r"ingredientes?[:.]?\s*([^.]+)", re.IGNORECASE),
    re.compile(r"ingredients?[:.]?\s*([^.]+)", re.IGNORECASE),
    re.compile(r"composici[oó]n[:.]?\s*([^.]+)", re.IGNORECASE),
    re.compile(r"composition[:.]?\s*([^.]+)", re.IGNORECASE),
    re.compile(r"contiene[:.]?\s*([^.]+)", re.IGNORECASE),
    re.compile(r"contains?[:.]?\s*([^.]+)", re.IGNORECASE),
]

SEPARATORS_RE = re.compile(r"[,;]")
LEADING_NON_LETTERS_RE = re.compile(r"^[^a-zA-ZáéíóúñÁÉÍÓÚÑ]+")
TRAILING_SYMBOLS_RE = re.compile(r"[^a-zA-ZáéíóúñÁÉÍÓÚÑ0-9\s()-]+$")
CONJUNCTION_RE = re.compile(r"\b(?:y|and|e)\b.*", re.DOTALL)


def strip_accents(text: str) -> str:
    """Remove combining marks (á -> a, ñ -> n)."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def normalize_e_number(match) -> str:
    return f"E{match.group(1)}{match.group(2).upper()}"


def clean_text(text: str) -> str:
    """
    Clean recognized text before splitting, keeping accents.
    Returns an empty string for empty input.
    """
    if not text:
        return ""
    text = collapse_whitespace(text)
    text = text.translate({ord(ch): None for ch in QUOTE_CHARS})
    text = BRACKET_RE.sub(" ", text)
    text = PARENTHESES_RE.sub("", text)
    text = E_NUMBER_RE.sub(normalize_e_number, text)
    return collapse_whitespace(text)


def preprocess_text(text: str) -> str:
    """Cleaned text with accents folded, ready for ingredient extraction."""
    return strip_accents(clean_text(text))


def find_ingredient_section(text: str) -> str:
    for pattern in SECTION_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1)
    return text


def clean_ingredient_name(ingredient: str) -> str:
    if not ingredient:
        return ""
    ingredient = ingredient.strip()
    ingredient = LEADING_NON_LETTERS_RE.sub("", ingredient)
    ingredient = TRAILING_SYMBOLS_RE.sub("", ingredient)
    ingredient = CONJUNCTION_RE.sub("", ingredient)
    ingredient = PARENTHESES_RE.sub("", ingredient)
    return collapse_whitespace(ingredient)


def dedupe_candidates(candidates):
    seen = set()
    unique = []
    for candidate in candidates:
        key = candidate.casefold()
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def extract_ingredients(text: str) -> list[str]:
    """Split preprocessed text into ordered, de-duplicated candidates."""
    if not text or not text.strip():
        return []

    section = find_ingredient_section(text)
    pieces = [piece.strip() for piece in SEPARATORS_RE.split(section)]
    pieces = [piece for piece in pieces if len(piece) >= MIN_CANDIDATE_LENGTH]

    candidates = []
    for piece in pieces:
        name = clean_ingredient_name(piece)
        if len(name) >= MIN_CANDIDATE_LENGTH:
            candidates.append(name)

    candidates = dedupe_candidates(candidates)
    logger.debug(f"Extracted {len(candidates)} candidates: {candidates}")
    return candidates


def parse_ingredients(text: str) -> list[str]:
    """Main parsing pipeline: raw recognized text -> candidate names."""
    return extract_ingredients(preprocess_text(text))
