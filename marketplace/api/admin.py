from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from marketplace.api.dependencies import ReposDep, require_role
from marketplace.models.principal import Principal
from marketplace.services import catalog_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class MessageOut(BaseModel):
    message: str


@router.post("/seed", response_model=MessageOut)
async def admin_reseed_catalog(
    principal: Annotated[Principal, Depends(require_role("admin"))],
    repos: ReposDep,
) -> MessageOut:
    logger.info("Catalog reseed requested by user=%s", principal.user_id)
    return MessageOut(message=await catalog_service.reseed_catalog(repos))
