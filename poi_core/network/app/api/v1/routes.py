# poi_core/network/app/api/v1/routes.py
from fastapi import APIRouter

from .endpoints import consensus

# Khởi tạo router chính cho API v1
api_router = APIRouter(prefix="/v1")

api_router.include_router(consensus.router, tags=["Consensus"])
