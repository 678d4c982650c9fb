import logging

import pytest
from pydantic import ValidationError

from healthscan.errors import KnowledgeBaseError
from healthscan.ingredients_logic.analysis import analyze
from healthscan.models import AnalysisResult, RecommendationType

LABELS = [
    "",
    "Ingredientes: sal, agua",
    "INGREDIENTES: Harina de trigo, azúcar, aceite de palma, cacao, lecitina de soja (E322), xilitol, sal.",
    "Ingredientes: carne de cerdo, E250, E-621",
    "Crema hidratante. Composición: agua, parabenos, glicerina",
    "texto ilegible ### 123",
]


def kinds(analysis):
    return [rec.type for rec in analysis.recommendations]


def test_empty_text():
    analysis = analyze("", [])
    assert analysis.detected_ingredients == ()
    assert analysis.risk_score == 0
    assert analysis.health_score_human == 100
    assert analysis.health_score_animal == 100
    assert analysis.product_category == "other"
    assert kinds(analysis) == [RecommendationType.SUCCESS]


def test_none_text_is_empty(bundled_kb):
    assert analyze(None, bundled_kb).detected_ingredients == ()


def test_single_safe_match_with_one_unknown():
    kb = [{"name": "azucar", "risk_level": "seguro", "category": "alimento"}]
    analysis = analyze("Ingredientes: azucar, agua", kb)

    assert analysis.detected_ingredients == ("azucar", "agua")
    assert [(m.detected, m.ingredient.name) for m in analysis.matched_ingredients] == [("azucar", "azucar")]
    assert analysis.unknown_ingredients == ("agua",)
    assert [ing.name for ing in analysis.beneficial_ingredients] == ["azucar"]
    assert analysis.harmful_ingredients == ()
    assert analysis.risk_score == 10
    assert analysis.health_score_human == 90
    assert analysis.health_score_animal == 95
    assert analysis.product_category == "alimento"
    assert kinds(analysis) == [RecommendationType.SUCCESS, RecommendationType.INFO]
    assert analysis.recommendations[1].message.startswith("1 ")


def test_single_dangerous_toxic_match():
    kb = [{
        "id": "x1",
        "name": "xilitol",
        "risk_level": "peligroso",
        "health_impact_animal": "Altamente tóxico para perros",
    }]
    analysis = analyze("Ingredientes: xilitol", kb)

    assert analysis.health_score_animal <= 70
    assert analysis.risk_score == 100
    assert analysis.health_score_human == 0
    assert kinds(analysis) == [
        RecommendationType.WARNING,
        RecommendationType.DANGER,
        RecommendationType.DANGER,
        RecommendationType.DANGER,
    ]
    pet_alert, pet_toxicity = analysis.recommendations[2:]
    assert "MASCOTAS" in pet_alert.title
    assert pet_toxicity.ingredients == ("xilitol",)
    assert "xilitol" in pet_toxicity.message


def test_exact_name_precedes_substring(sample_kb):
    analysis = analyze("Ingredientes: sal marina", sample_kb)
    assert analysis.matched_ingredients[0].ingredient.id == "2"


def test_full_label_against_bundled_table(bundled_kb):
    analysis = analyze(LABELS[2], bundled_kb)

    assert analysis.detected_ingredients == (
        "Harina de trigo", "azucar", "aceite de palma", "cacao", "lecitina de soja", "xilitol", "sal",
    )
    assert analysis.unknown_ingredients == ()
    assert [ing.name for ing in analysis.harmful_ingredients] == ["xilitol"]
    assert [ing.name for ing in analysis.beneficial_ingredients] == [
        "harina de trigo", "cacao", "lecitina de soja",
    ]
    assert analysis.risk_score == 31
    assert analysis.health_score_human == 69
    assert analysis.health_score_animal == 0
    assert analysis.product_category == "alimento"
    assert kinds(analysis) == [
        RecommendationType.WARNING,
        RecommendationType.WARNING,
        RecommendationType.DANGER,
        RecommendationType.DANGER,
    ]
    # cacao is toxic for pets but not harmful, so only xilitol is named
    assert analysis.recommendations[3].ingredients == ("xilitol",)


def test_e_numbers_against_bundled_table(bundled_kb):
    analysis = analyze(LABELS[3], bundled_kb)

    assert analysis.detected_ingredients == ("carne de cerdo", "E250", "E621")
    assert [m.ingredient.name for m in analysis.matched_ingredients] == ["nitrito de sodio", "glutamato monosódico"]
    assert analysis.unknown_ingredients == ("carne de cerdo",)
    assert analysis.risk_score == 50
    assert analysis.health_score_animal == 55
    assert kinds(analysis) == [
        RecommendationType.WARNING,
        RecommendationType.DANGER,
        RecommendationType.DANGER,
        RecommendationType.DANGER,
        RecommendationType.INFO,
    ]


def test_empty_table_leaves_everything_unknown():
    analysis = analyze("Ingredientes: sal, agua", [])
    assert analysis.unknown_ingredients == ("sal", "agua")
    assert analysis.matched_ingredients == ()
    assert analysis.risk_score == 0
    assert analysis.health_score_human == 100


@pytest.mark.parametrize("label", LABELS)
def test_scores_stay_in_range(label, bundled_kb):
    analysis = analyze(label, bundled_kb)
    for score in (analysis.risk_score, analysis.health_score_human, analysis.health_score_animal):
        assert 0 <= score <= 100
    assert analysis.health_score_human == 100 - analysis.risk_score


@pytest.mark.parametrize("label", LABELS)
def test_repeated_runs_are_identical(label, bundled_kb):
    assert analyze(label, bundled_kb).model_dump_json() == analyze(label, bundled_kb).model_dump_json()


@pytest.mark.parametrize("label", LABELS)
def test_json_round_trip(label, bundled_kb):
    analysis = analyze(label, bundled_kb)
    restored = AnalysisResult.model_validate_json(analysis.model_dump_json())
    assert restored.model_dump() == analysis.model_dump()


def test_result_is_frozen(bundled_kb):
    analysis = analyze(LABELS[1], bundled_kb)
    with pytest.raises(ValidationError):
        analysis.risk_score = 99


def test_malformed_records_are_skipped(caplog):
    kb = [
        {"name": "sal"},
        {"risk_level": "peligroso"},
        {"name": "sal", "risk_level": "seguro", "id": 7},
    ]
    with caplog.at_level(logging.WARNING):
        analysis = analyze("Ingredientes: sal", kb)
    assert analysis.matched_ingredients[0].ingredient.id == "7"
    assert len([r for r in caplog.records if "malformed" in r.getMessage()]) == 2


@pytest.mark.parametrize("kb", [None, 42, "sal", {"name": "sal", "risk_level": "seguro"}])
def test_invalid_table_is_rejected(kb):
    with pytest.raises(KnowledgeBaseError):
        analyze("Ingredientes: sal", kb)


def test_table_is_not_mutated(sample_kb):
    before = [record.model_dump() for record in sample_kb]
    analyze("Ingredientes: sal, E250, azucar", sample_kb)
    assert [record.model_dump() for record in sample_kb] == before
