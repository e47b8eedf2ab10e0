# routers/extraction_router.py
from fastapi import APIRouter, Depends, Query
from config import get_settings
from models.bulletin_model import ExtractionRequest
from routers.dependencies import get_ymag_client
from services.extraction_service import extract_group_data, list_campuses, list_groups, list_periods
from services.ymag_client import YmagClient

router = APIRouter(prefix="/api", tags=["extraction"])

@router.post("/sql")
async def api_extract_group_data(request: ExtractionRequest, client: YmagClient = Depends(get_ymag_client)):
    return await extract_group_data(request, client)

@router.get("/periods")
async def api_list_periods(client: YmagClient = Depends(get_ymag_client)):
    settings = get_settings()
    return await list_periods(client, settings.academic_year_start, settings.academic_year_end)

@router.get("/campuses")
async def api_list_campuses(client: YmagClient = Depends(get_ymag_client)):
    return await list_campuses(client)

@router.get("/groups")
async def api_list_groups(campus: int = Query(...), client: YmagClient = Depends(get_ymag_client)):
    return await list_groups(client, campus)
