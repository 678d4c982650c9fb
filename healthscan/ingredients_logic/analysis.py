import logging

from healthscan.ingredients_logic.categories import detect_product_category
from healthscan.ingredients_logic.ingredient_matcher import find_matching_ingredient
from healthscan.ingredients_logic.ingredient_parser import parse_ingredients
from healthscan.ingredients_logic.recommendations import generate_recommendations
from healthscan.ingredients_logic.scoring import (
    calculate_animal_health_score,
    calculate_human_health_score,
    calculate_risk_score,
)
from healthscan.knowledge_base import KnowledgeBase
from healthscan.models import AnalysisResult, MatchedIngredient

logger = logging.getLogger(__name__)


def perform_analysis(detected_ingredients, full_text: str, knowledge_base: KnowledgeBase) -> AnalysisResult:
    """Match, classify, score, categorize and advise for already parsed candidates."""
    matched = []
    unknown = []
    harmful = []
    beneficial = []

    records = knowledge_base.records
    for detected in detected_ingredients:
        ingredient = find_matching_ingredient(detected, records)
        if ingredient is None:
            unknown.append(detected)
            continue

        matched.append(MatchedIngredient(detected=detected, ingredient=ingredient))
        if ingredient.is_harmful:
            harmful.append(ingredient)
        elif ingredient.is_beneficial:
            beneficial.append(ingredient)

    risk_score = calculate_risk_score(matched)
    analysis = AnalysisResult(
        full_text=full_text,
        detected_ingredients=tuple(detected_ingredients),
        matched_ingredients=tuple(matched),
        unknown_ingredients=tuple(unknown),
        harmful_ingredients=tuple(harmful),
        beneficial_ingredients=tuple(beneficial),
        risk_score=risk_score,
        health_score_human=calculate_human_health_score(risk_score),
        health_score_animal=calculate_animal_health_score(matched),
        product_category=detect_product_category(full_text),
    )
    return analysis.model_copy(update={"recommendations": generate_recommendations(analysis)})


def analyze(full_text, knowledge_base) -> AnalysisResult:
    """
    Full pipeline for one label: text -> candidates -> matches -> scores ->
    category -> recommendations. The ingredient table is only read.
    Raises KnowledgeBaseError if knowledge_base is not a sequence of records.
    """
    snapshot = KnowledgeBase.of(knowledge_base)
    full_text = full_text or ""

    candidates = parse_ingredients(full_text)
    analysis = perform_analysis(candidates, full_text, snapshot)
    logger.info(
        f"Analysis completed: {len(analysis.matched_ingredients)}/{len(candidates)} matched, "
        f"risk {analysis.risk_score}, category {analysis.product_category}"
    )
    return analysis
