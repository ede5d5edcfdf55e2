"""FastAPI app over the exports directory."""

from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from court_export.agents import ThreadAnalyzer
from court_export.config import EXPORTS_DIR, OUTPUT_DIR
from court_export.documents import PdfRenderer
from court_export.utils.logger import get_logger

from .routes import router as threads_router

logger = get_logger("court_export.api.server")


def create_app(
    exports_dir: Path = EXPORTS_DIR,
    analyzer: Optional[ThreadAnalyzer] = None,
    pdf_renderer: Optional[PdfRenderer] = None,
    output_dir: Path = OUTPUT_DIR,
) -> FastAPI:
    """
    Create the API app. Without an analyzer, documents carry no analysis section and
    /api/analyze answers 503. Without a pdf_renderer, pdf requests write HTML instead.
    """
    app = FastAPI(title="Court Export API", version="0.1.0")
    app.state.exports_dir = Path(exports_dir)
    app.state.output_dir = Path(output_dir)
    app.state.analyzer = analyzer
    app.state.pdf_renderer = pdf_renderer

    @app.exception_handler(RequestValidationError)
    async def invalid_parameters(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("api.invalid_parameters", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request parameters", "errors": jsonable_errors(exc)},
        )

    app.include_router(threads_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    logger.info(
        "api.app_created",
        exports_dir=str(app.state.exports_dir),
        analysis=analyzer is not None,
        pdf=pdf_renderer is not None,
    )
    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
