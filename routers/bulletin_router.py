# routers/bulletin_router.py
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse
from config import get_settings
from models.bulletin_model import BulletinRequest
from routers.dependencies import get_file_storage
from services.bulletin_service import generate_bulletins
from utils.file_storage import FileStorage

router = APIRouter(prefix="/api", tags=["bulletins"])

@router.post("/pdf")
async def api_generate_bulletins(request: BulletinRequest, storage: FileStorage = Depends(get_file_storage)):
    return await generate_bulletins(request, storage, get_settings().school_name)

@router.get("/download")
async def api_download_archive(file_id: str = Query(..., alias="id"), storage: FileStorage = Depends(get_file_storage)):
    """
    Send a stored archive. Invalid ids are turned into a 400 by the
    InvalidFileIdError handler registered on the app.
    """
    if not storage.has_file(file_id):
        raise HTTPException(status_code=404, detail="Fichier introuvable")

    return FileResponse(
        storage.get_file_path(file_id),
        media_type="application/zip",
        filename=file_id
    )
