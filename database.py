# database.py
from motor.motor_asyncio import AsyncIOMotorClient
from config import get_settings

settings = get_settings()
client = AsyncIOMotorClient(settings.mongodb_uri)
db = client[settings.mongodb_db]

def get_extraction_collection():
    return db["extractions"]

def get_batch_collection():
    return db["bulletin_batches"]
