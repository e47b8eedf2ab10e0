# routers/dependencies.py
from config import get_settings
from services.ymag_client import YmagClient
from utils.file_storage import FileStorage

def get_ymag_client() -> YmagClient:
    settings = get_settings()
    return YmagClient(settings.ymag_api_url, settings.ymag_api_token, timeout=settings.ymag_timeout)

def get_file_storage() -> FileStorage:
    return FileStorage(get_settings().storage_dir)
