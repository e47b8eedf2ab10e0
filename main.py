# main.py

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from config import get_settings
from routers import bulletin_router, extraction_router
from services.ymag_client import YmagQueryError
from utils.file_storage import InvalidFileIdError
from utils.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Bulletins de notes")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(YmagQueryError)
async def ymag_error_handler(request: Request, exc: YmagQueryError):
    logger.error("School API error on {}: {}", request.url.path, exc)
    return JSONResponse(
        status_code=502,
        content={"success": False, "error": "Erreur lors de la récupération des données", "details": str(exc)}
    )

@app.exception_handler(InvalidFileIdError)
async def invalid_file_id_handler(request: Request, exc: InvalidFileIdError):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

app.include_router(extraction_router.router)
app.include_router(bulletin_router.router)

@app.get("/")
def read_root():
    return {"message": "Bienvenue sur le générateur de bulletins"}
