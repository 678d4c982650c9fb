import base64
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Body, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from healthscan.api.db import AnalysisStore, fetch_knowledge_base, filter_history, load_knowledge_base
from healthscan.api.utils import extract_text_from_image
from healthscan.config import Settings, configure_logging
from healthscan.errors import KnowledgeBaseError, OCRError
from healthscan.ingredients_logic.analysis import analyze
from healthscan.knowledge_base import KnowledgeBaseStore
from healthscan.models import IngredientRecord, ReloadResponse, ScanResponse, ScanTextRequest

logger = logging.getLogger(__name__)


def knowledge_base_loader(settings: Settings):
    if settings.tables_url:
        return lambda: fetch_knowledge_base(settings.tables_url, settings.kb_limit, settings.request_timeout)
    return lambda: load_knowledge_base(settings.kb_path)


def build_store(settings: Settings) -> KnowledgeBaseStore:
    """Store wired to the configured table; it stays empty until refresh_store runs."""
    return KnowledgeBaseStore(loader=knowledge_base_loader(settings))


def refresh_store(store: KnowledgeBaseStore) -> None:
    try:
        store.reload()
    except (OSError, ValueError) as e:
        logger.error(f"Error loading ingredient table: {e}")


def create_app(settings: Optional[Settings] = None, store: Optional[KnowledgeBaseStore] = None,
               analysis_store: Optional[AnalysisStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    load_on_startup = store is None
    if store is None:
        store = build_store(settings)
    if analysis_store is None and settings.tables_url:
        analysis_store = AnalysisStore(settings.tables_url, timeout=settings.request_timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if load_on_startup:
            refresh_store(store)
        yield

    app = FastAPI(title="HealthScan", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.analysis_store = analysis_store

    @app.exception_handler(KnowledgeBaseError)
    def knowledge_base_error_handler(request: Request, exc: KnowledgeBaseError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    def run_scan(text: str, save: bool, session_id: Optional[str], image_data: str = "") -> ScanResponse:
        # One snapshot per request, even if a reload lands meanwhile.
        snapshot = store.current()
        analysis = analyze(text, snapshot)
        analysis_id = None
        if save and analysis_store is not None:
            analysis_id = analysis_store.save_analysis(analysis, image_data=image_data, session_id=session_id)
        return ScanResponse(analysis=analysis, analysis_id=analysis_id)

    @app.post("/scan/text", response_model=ScanResponse)
    def scan_text(request: ScanTextRequest = Body(...)):
        return run_scan(request.text, request.save, request.session_id)

    @app.post("/scan/image", response_model=ScanResponse)
    def scan_image(file: UploadFile = File(...), save: bool = Query(False), session_id: Optional[str] = Query(None)):
        image_bytes = file.file.read()
        if not image_bytes:
            raise HTTPException(status_code=400, detail="No image provided")
        try:
            text = extract_text_from_image(image_bytes, lang=settings.ocr_lang)
        except OCRError as e:
            logger.error(f"Error in OCR processing: {e}")
            raise HTTPException(status_code=422, detail=str(e))
        image_data = base64.b64encode(image_bytes).decode("ascii")
        return run_scan(text, save, session_id, image_data=image_data)

    @app.get("/ingredients", response_model=List[IngredientRecord])
    def list_ingredients(search: str = "", risk_level: str = "", category: str = ""):
        return store.current().filter(search=search, risk_level=risk_level, category=category)

    @app.get("/ingredients/{ingredient_id}", response_model=IngredientRecord)
    def get_ingredient(ingredient_id: str):
        ingredient = store.current().get(ingredient_id)
        if ingredient is None:
            raise HTTPException(status_code=404, detail="Ingredient not found")
        return ingredient

    @app.get("/history")
    def list_history(search: str = "", limit: int = Query(50, ge=1, le=500)):
        if analysis_store is None:
            return []
        return filter_history(analysis_store.list_history(limit), search)

    @app.get("/history/{analysis_id}")
    def get_analysis(analysis_id: str):
        analysis = analysis_store.get_analysis(analysis_id) if analysis_store is not None else None
        if analysis is None:
            raise HTTPException(status_code=404, detail="Analysis not found")
        return analysis

    @app.post("/knowledge-base/reload", response_model=ReloadResponse)
    def reload_knowledge_base():
        try:
            snapshot = store.reload()
        except (OSError, ValueError) as e:
            logger.error(f"Error reloading ingredient table: {e}")
            raise HTTPException(status_code=503, detail="Ingredient table could not be reloaded")
        return ReloadResponse(ingredients=len(snapshot))

    return app


def get_app() -> FastAPI:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return create_app(settings)


app = get_app()
