"""Software-only simulation / demo - no real systems will be contacted or modified."""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .logging_config import logger, setup_logging
from .routes import analysis, exports, health, packets
from .services.analysis import EmptyCaptureError

setup_logging()
settings = get_settings()
app = FastAPI(title=settings.app_name, version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("app.start", store_backend=settings.store_backend, store_path=settings.packet_store_path)


@app.exception_handler(EmptyCaptureError)
async def empty_capture_handler(request: Request, exc: EmptyCaptureError) -> JSONResponse:
    logger.info("analysis.empty", path=str(request.url))
    return JSONResponse(status_code=400, content={"error_code": "NO_PACKETS", "message": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:  # pragma: no cover - wiring
    logger.warning("value.error", path=str(request.url), reason=str(exc))
    return JSONResponse(status_code=400, content={"error_code": "VALUE_ERROR", "message": str(exc)})


app.include_router(health.router)
app.include_router(packets.router)
app.include_router(analysis.router)
app.include_router(exports.router)


def run() -> None:  # pragma: no cover - process entry point
    import uvicorn

    uvicorn.run(app, host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":  # pragma: no cover
    run()
