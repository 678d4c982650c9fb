import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_KB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "ingredients.json")
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class Settings(BaseModel):
    kb_path: str = DEFAULT_KB_PATH
    tables_url: Optional[str] = None
    kb_limit: int = 100
    request_timeout: float = 5.0
    ocr_lang: str = "spa+eng"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Reads HEALTHSCAN_* variables (a .env file is honoured).
        Unset variables keep their defaults.
        """
        load_dotenv()
        values = {
            "kb_path": os.getenv("HEALTHSCAN_KB_PATH"),
            "tables_url": os.getenv("HEALTHSCAN_TABLES_URL"),
            "kb_limit": os.getenv("HEALTHSCAN_KB_LIMIT"),
            "request_timeout": os.getenv("HEALTHSCAN_REQUEST_TIMEOUT"),
            "ocr_lang": os.getenv("HEALTHSCAN_OCR_LANG"),
            "log_level": os.getenv("HEALTHSCAN_LOG_LEVEL"),
        }
        return cls(**{k: v for k, v in values.items() if v not in (None, "")})


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
