"""
Rule-based advice over a scored analysis.

Each rule looks at the analysis and returns one Recommendation or None.
RECOMMENDATION_RULES fixes the order in which they are emitted.
"""

from typing import Optional

from healthscan.ingredients_logic.ingredient_matcher import fold
from healthscan.models import AnalysisResult, Recommendation, RecommendationType

SAFE_HUMAN_SCORE = 80
MODERATE_HUMAN_SCORE = 60
PET_SAFETY_THRESHOLD = 70

TOXIC_KEYWORDS = ("toxic",)


def harmful_ingredients_rule(analysis: AnalysisResult) -> Optional[Recommendation]:
    if not analysis.harmful_ingredients:
        return None
    count = len(analysis.harmful_ingredients)
    return Recommendation(
        type=RecommendationType.WARNING,
        title="Ingredientes Perjudiciales Detectados",
        message=f"Se encontraron {count} ingredientes con riesgo alto o peligroso.",
        ingredients=tuple(ing.name for ing in analysis.harmful_ingredients),
    )


def health_band_rule(analysis: AnalysisResult) -> Optional[Recommendation]:
    score = analysis.health_score_human
    if score < MODERATE_HUMAN_SCORE:
        return Recommendation(
            type=RecommendationType.DANGER,
            title="Producto No Recomendado",
            message="Este producto contiene múltiples ingredientes perjudiciales para la salud humana.",
        )
    if score < SAFE_HUMAN_SCORE:
        return Recommendation(
            type=RecommendationType.WARNING,
            title="Consumo con Moderación",
            message="Este producto debe consumirse con moderación debido a algunos ingredientes de riesgo.",
        )
    return Recommendation(
        type=RecommendationType.SUCCESS,
        title="Producto Relativamente Seguro",
        message="La mayoría de ingredientes son seguros para el consumo humano.",
    )


def pet_safety_rule(analysis: AnalysisResult) -> Optional[Recommendation]:
    if analysis.health_score_animal > PET_SAFETY_THRESHOLD:
        return None
    return Recommendation(
        type=RecommendationType.DANGER,
        title="NO APTO PARA MASCOTAS",
        message="Este producto contiene ingredientes tóxicos para animales. Mantener fuera del alcance de mascotas.",
    )


def is_toxic_for_animals(ingredient) -> bool:
    impact = fold(ingredient.health_impact_animal)
    return any(keyword in impact for keyword in TOXIC_KEYWORDS)


def pet_toxicity_rule(analysis: AnalysisResult) -> Optional[Recommendation]:
    dangerous_for_pets = [ing.name for ing in analysis.harmful_ingredients if is_toxic_for_animals(ing)]
    if not dangerous_for_pets:
        return None
    return Recommendation(
        type=RecommendationType.DANGER,
        title="Tóxico para Mascotas",
        message=f"Ingredientes especialmente peligrosos para animales: {', '.join(dangerous_for_pets)}",
        ingredients=tuple(dangerous_for_pets),
    )


def unknown_ingredients_rule(analysis: AnalysisResult) -> Optional[Recommendation]:
    if not analysis.unknown_ingredients:
        return None
    count = len(analysis.unknown_ingredients)
    return Recommendation(
        type=RecommendationType.INFO,
        title="Ingredientes No Identificados",
        message=f"{count} ingredientes no se pudieron identificar en nuestra base de datos.",
        ingredients=tuple(analysis.unknown_ingredients),
    )


RECOMMENDATION_RULES = (
    harmful_ingredients_rule,
    health_band_rule,
    pet_safety_rule,
    pet_toxicity_rule,
    unknown_ingredients_rule,
)


def generate_recommendations(analysis: AnalysisResult, rules=RECOMMENDATION_RULES) -> tuple[Recommendation, ...]:
    recommendations = []
    for rule in rules:
        recommendation = rule(analysis)
        if recommendation is not None:
            recommendations.append(recommendation)
    return tuple(recommendations)
