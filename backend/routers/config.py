"""Configuration API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from services.config_manager import ConfigManager

router = APIRouter()


class ConfigUpdateRequest(BaseModel):
    """Partial update; omitted sections are left untouched"""

    parser: dict[str, Any] | None = None
    logging: dict[str, Any] | None = None


class ConfigResponse(BaseModel):
    parser: dict[str, Any]
    logging: dict[str, Any]
    server: dict[str, Any]


@router.get("", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """Current settings merged over the defaults"""
    config = ConfigManager.get_instance().get_config()
    return ConfigResponse(parser=config["parser"], logging=config["logging"], server=config["server"])


@router.put("")
async def update_config(request: ConfigUpdateRequest) -> dict[str, Any]:
    """Update parser and logging settings; new sessions pick them up"""
    config_manager = ConfigManager.get_instance()
    updates = request.model_dump(exclude_none=True)

    try:
        for section, values in updates.items():
            config_manager.update_section(section, values)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"status": "success", "message": "Configuration updated", "updated": sorted(updates)}
