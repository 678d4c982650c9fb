import pytest

from healthscan.api.db import load_knowledge_base
from healthscan.config import DEFAULT_KB_PATH
from healthscan.knowledge_base import KnowledgeBase
from healthscan.models import IngredientRecord, MatchedIngredient

SAMPLE_RECORDS = [
    {
        "id": "1",
        "name": "sal",
        "alternative_names": ["cloruro de sodio"],
        "risk_level": "moderado",
        "category": "condimento",
        "health_impact_animal": "Moderado en grandes cantidades.",
    },
    {
        "id": "2",
        "name": "sal marina",
        "risk_level": "seguro",
        "category": "condimento",
        "health_impact_animal": "Seguro.",
    },
    {
        "id": "3",
        "name": "nitrito de sodio",
        "alternative_names": ["nitrito sodico"],
        "e_number": "E250",
        "risk_level": "alto_riesgo",
        "category": "conservante",
        "health_impact_animal": "Tóxico para perros y gatos.",
    },
    {
        "id": "4",
        "name": "azúcar",
        "alternative_names": ["sacarosa"],
        "risk_level": "seguro",
        "category": "edulcorante",
    },
    {
        "id": "5",
        "name": "tartrazina",
        "e_number": "E102",
        "risk_level": "alto_riesgo",
        "category": "colorante",
        "health_impact_animal": "Efecto desconocido.",
    },
]


def make_record(name="ingrediente", risk_level="seguro", **fields):
    return IngredientRecord(name=name, risk_level=risk_level, **fields)


def make_match(risk_level="seguro", animal=None, name="ingrediente"):
    record = make_record(name=name, risk_level=risk_level, health_impact_animal=animal)
    return MatchedIngredient(detected=name, ingredient=record)


@pytest.fixture
def sample_kb():
    return KnowledgeBase(SAMPLE_RECORDS)


@pytest.fixture
def bundled_kb():
    return load_knowledge_base(DEFAULT_KB_PATH)
