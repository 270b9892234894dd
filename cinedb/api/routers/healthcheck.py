# cinedb/api/routers/healthcheck.py

from fastapi import APIRouter, Depends

from cinedb.api.deps import get_app_settings
from cinedb.api.helpers import EnvelopeResponse, write_json
from cinedb.core.config import VERSION, Settings

router = APIRouter(tags=["healthcheck"])


@router.get("/healthcheck", name="healthcheck.show")
async def healthcheck(settings: Settings = Depends(get_app_settings)) -> EnvelopeResponse:
    return write_json(200, {
        "status": "available",
        "system_info": {
            "environment": settings.env,
            "version": VERSION,
        },
    })
