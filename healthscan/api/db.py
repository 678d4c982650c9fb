# Ingredient table loading and analysis history storage
import json
import logging
import random
import string
import time
from typing import Optional

import requests

from healthscan.knowledge_base import KnowledgeBase
from healthscan.models import AnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_NAME = "Producto Escaneado"
IMAGE_DATA_LIMIT = 1000


def table_rows(payload):
    """Rows of a table dump: either a bare list or {"data": [...]}."""
    if isinstance(payload, dict):
        return payload.get("data") or []
    return payload


def load_knowledge_base(path: str) -> KnowledgeBase:
    with open(path, encoding="utf-8") as f:
        rows = table_rows(json.load(f))
    knowledge_base = KnowledgeBase(rows)
    logger.info(f"Loaded {len(knowledge_base)} ingredients from {path}")
    return knowledge_base


def fetch_knowledge_base(base_url: str, limit: int = 100, timeout: float = 5) -> KnowledgeBase:
    """GET tables/ingredients. Any transport or JSON error gives an empty table."""
    url = f"{base_url.rstrip('/')}/tables/ingredients"
    try:
        resp = requests.get(url, params={"limit": limit}, timeout=timeout)
        resp.raise_for_status()
        rows = table_rows(resp.json())
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Error loading ingredient table from {url}: {e}")
        return KnowledgeBase()
    knowledge_base = KnowledgeBase(rows)
    logger.info(f"Loaded {len(knowledge_base)} ingredients from {url}")
    return knowledge_base


def new_session_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=11))
    return f"session_{int(time.time() * 1000)}_{suffix}"


def analysis_record(analysis: AnalysisResult, image_data: str = "", product_name: str = DEFAULT_PRODUCT_NAME) -> dict:
    """Flatten an analysis into a product_analysis row."""
    return {
        "product_name": product_name,
        "category": analysis.product_category,
        "ingredients_text": analysis.full_text,
        "ingredients_detected": list(analysis.detected_ingredients),
        "risk_score": analysis.risk_score,
        "health_score_human": analysis.health_score_human,
        "health_score_animal": analysis.health_score_animal,
        "harmful_ingredients": [ing.name for ing in analysis.harmful_ingredients],
        "beneficial_ingredients": [ing.name for ing in analysis.beneficial_ingredients],
        "recommendations": json.dumps(
            [rec.model_dump(mode="json", exclude_none=True) for rec in analysis.recommendations],
            ensure_ascii=False,
        ),
        "analysis_date": int(time.time() * 1000),
        "image_data": (image_data or "")[:IMAGE_DATA_LIMIT],
    }


def filter_history(items, search: str = "") -> list:
    term = (search or "").lower()
    if not term:
        return list(items)
    return [
        item for item in items
        if term in (item.get("product_name") or "").lower()
        or term in (item.get("notes") or "").lower()
    ]


class AnalysisStore:
    """Client for the product_analysis and user_history tables."""

    def __init__(self, base_url: str, timeout: float = 5, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, table: str, record_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/tables/{table}"
        return f"{url}/{record_id}" if record_id else url

    def save_analysis(self, analysis: AnalysisResult, image_data: str = "", session_id: Optional[str] = None) -> Optional[str]:
        record = analysis_record(analysis, image_data)
        try:
            resp = self.session.post(self._url("product_analysis"), json=record, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error saving analysis: {e}")
            return None
        if not isinstance(payload, dict) or payload.get("id") is None:
            logger.error(f"Error saving analysis: unexpected response {payload!r}")
            return None
        analysis_id = payload["id"]
        logger.info(f"Analysis saved with ID: {analysis_id}")

        self.save_to_history(analysis_id, record, session_id or new_session_id())
        return analysis_id

    def save_to_history(self, analysis_id: str, record: dict, session_id: str) -> bool:
        entry = {
            "session_id": session_id,
            "analysis_id": analysis_id,
            "product_name": record["product_name"],
            "risk_score": record["risk_score"],
            "date": int(time.time() * 1000),
            "favorites": False,
            "notes": "",
        }
        try:
            resp = self.session.post(self._url("user_history"), json=entry, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error saving to history: {e}")
            return False
        return True

    def list_history(self, limit: int = 50) -> list:
        try:
            resp = self.session.get(self._url("user_history"), params={"limit": limit, "sort": "-date"}, timeout=self.timeout)
            resp.raise_for_status()
            return table_rows(resp.json())
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error loading history: {e}")
            return []

    def get_analysis(self, analysis_id: str) -> Optional[dict]:
        try:
            resp = self.session.get(self._url("product_analysis", analysis_id), timeout=self.timeout)
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            return resp.json() or None
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error loading analysis {analysis_id}: {e}")
            return None
