import math

from healthscan.ingredients_logic.ingredient_matcher import fold
from healthscan.models import RiskLevel

RISK_WEIGHTS = {
    RiskLevel.MUY_SEGURO: 0,
    RiskLevel.SEGURO: 1,
    RiskLevel.MODERADO: 3,
    RiskLevel.ALTO_RIESGO: 7,
    RiskLevel.PELIGROSO: 10,
}
DEFAULT_RISK_WEIGHT = 5

MAX_SCORE = 100

# Animal impact text is folded before the scan, so stems are accent-free.
# Families are checked in order and the first one found sets the penalty.
ANIMAL_IMPACT_PENALTIES = [
    (("toxic", "peligros", "dangerous"), 30),
    (("moderad", "precaucion", "moderate", "caution"), 15),
    (("segur", "beneficios", "safe", "beneficial"), 0),
]
UNKNOWN_ANIMAL_IMPACT_PENALTY = 5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def risk_weight(risk_level) -> int:
    return RISK_WEIGHTS.get(RiskLevel.parse(risk_level), DEFAULT_RISK_WEIGHT)


def calculate_risk_score(matched_ingredients) -> int:
    """Average risk weight of the matched ingredients, scaled to 0-100."""
    if not matched_ingredients:
        return 0
    total = sum(risk_weight(match.ingredient.risk_level) for match in matched_ingredients)
    return min(MAX_SCORE, round_half_up(total * 10 / len(matched_ingredients)))


def calculate_human_health_score(risk_score: int) -> int:
    return max(0, MAX_SCORE - risk_score)


def animal_impact_penalty(impact_text) -> int:
    impact = fold(impact_text)
    for keywords, penalty in ANIMAL_IMPACT_PENALTIES:
        if any(keyword in impact for keyword in keywords):
            return penalty
    return UNKNOWN_ANIMAL_IMPACT_PENALTY


def calculate_animal_health_score(matched_ingredients) -> int:
    score = MAX_SCORE
    for match in matched_ingredients:
        score -= animal_impact_penalty(match.ingredient.health_impact_animal)
    return max(0, score)
