from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskLevel(str, Enum):
    MUY_SEGURO = "muy_seguro"
    SEGURO = "seguro"
    MODERADO = "moderado"
    ALTO_RIESGO = "alto_riesgo"
    PELIGROSO = "peligroso"

    @classmethod
    def parse(cls, value) -> Optional["RiskLevel"]:
        """
        Returns the RiskLevel for a stored level or one of its English aliases.
        Unrecognized values give None.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower().replace("-", "_").replace(" ", "_")
        return RISK_LEVEL_ALIASES.get(key)


RISK_LEVEL_ALIASES = {
    "muy_seguro": RiskLevel.MUY_SEGURO,
    "very_safe": RiskLevel.MUY_SEGURO,
    "seguro": RiskLevel.SEGURO,
    "safe": RiskLevel.SEGURO,
    "moderado": RiskLevel.MODERADO,
    "moderate": RiskLevel.MODERADO,
    "alto_riesgo": RiskLevel.ALTO_RIESGO,
    "high_risk": RiskLevel.ALTO_RIESGO,
    "peligroso": RiskLevel.PELIGROSO,
    "dangerous": RiskLevel.PELIGROSO,
}

HARMFUL_LEVELS = (RiskLevel.ALTO_RIESGO, RiskLevel.PELIGROSO)
BENEFICIAL_LEVELS = (RiskLevel.MUY_SEGURO, RiskLevel.SEGURO)


class IngredientRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: str = Field(min_length=1)
    alternative_names: Tuple[str, ...] = ()
    e_number: Optional[str] = None
    cas_number: Optional[str] = None
    risk_level: str = Field(min_length=1)
    category: Optional[str] = None
    health_impact_human: Optional[str] = None
    health_impact_animal: Optional[str] = None
    max_daily_intake: Optional[str] = None
    banned_countries: Tuple[str, ...] = ()
    description: Optional[str] = None

    # Only name and risk_level can make a record malformed; the optional
    # fields take whatever loosely typed values the table holds.
    @field_validator(
        "id", "e_number", "cas_number", "category", "health_impact_human",
        "health_impact_animal", "max_daily_intake", "description", mode="before",
    )
    @classmethod
    def _as_text(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("alternative_names", "banned_countries", mode="before")
    @classmethod
    def _as_text_tuple(cls, value):
        if value is None:
            return ()
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(item if isinstance(item, str) else str(item) for item in value if item is not None)
        return (value if isinstance(value, str) else str(value),)

    @field_validator("name", "risk_level")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @property
    def level(self) -> Optional[RiskLevel]:
        return RiskLevel.parse(self.risk_level)

    @property
    def is_harmful(self) -> bool:
        return self.level in HARMFUL_LEVELS

    @property
    def is_beneficial(self) -> bool:
        return self.level in BENEFICIAL_LEVELS


class MatchedIngredient(BaseModel):
    model_config = ConfigDict(frozen=True)

    detected: str
    ingredient: IngredientRecord


class RecommendationType(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    INFO = "info"


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: RecommendationType
    title: str
    message: str
    ingredients: Optional[Tuple[str, ...]] = None


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_text: str = ""
    detected_ingredients: Tuple[str, ...] = ()
    matched_ingredients: Tuple[MatchedIngredient, ...] = ()
    unknown_ingredients: Tuple[str, ...] = ()
    harmful_ingredients: Tuple[IngredientRecord, ...] = ()
    beneficial_ingredients: Tuple[IngredientRecord, ...] = ()
    risk_score: int = Field(default=0, ge=0, le=100)
    health_score_human: int = Field(default=100, ge=0, le=100)
    health_score_animal: int = Field(default=100, ge=0, le=100)
    recommendations: Tuple[Recommendation, ...] = ()
    product_category: str = "other"


# Request/response bodies for the HTTP surface

class ScanTextRequest(BaseModel):
    text: str = ""
    save: bool = False
    session_id: Optional[str] = None


class ScanResponse(BaseModel):
    analysis: AnalysisResult
    analysis_id: Optional[str] = None


class ReloadResponse(BaseModel):
    ingredients: int
