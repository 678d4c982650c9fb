import os

from healthscan.config import DEFAULT_KB_PATH, Settings

ENV_VARS = [
    "HEALTHSCAN_KB_PATH",
    "HEALTHSCAN_TABLES_URL",
    "HEALTHSCAN_KB_LIMIT",
    "HEALTHSCAN_REQUEST_TIMEOUT",
    "HEALTHSCAN_OCR_LANG",
    "HEALTHSCAN_LOG_LEVEL",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)
    settings = Settings.from_env()
    assert settings.kb_path == DEFAULT_KB_PATH
    assert settings.tables_url is None
    assert settings.kb_limit == 100
    assert settings.ocr_lang == "spa+eng"
    assert os.path.exists(settings.kb_path)


def test_reads_environment(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HEALTHSCAN_TABLES_URL", "http://tables.local")
    monkeypatch.setenv("HEALTHSCAN_KB_LIMIT", "250")
    monkeypatch.setenv("HEALTHSCAN_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("HEALTHSCAN_OCR_LANG", "")
    settings = Settings.from_env()
    assert settings.tables_url == "http://tables.local"
    assert settings.kb_limit == 250
    assert settings.request_timeout == 2.5
    assert settings.ocr_lang == "spa+eng"
