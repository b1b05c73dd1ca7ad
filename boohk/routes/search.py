import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from boohk.auth import require_auth
from boohk.models import User
from boohk.services import search as search_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search", tags=["search"])


class SearchRequest(BaseModel):
    query: Any = None
    filters: Optional[str] = None
    indexName: Optional[str] = None
    page: int = 0
    hitsPerPage: int = 10


@router.post("")
async def run_search(data: SearchRequest, user: User = Depends(require_auth)):
    if not isinstance(data.query, str):
        return JSONResponse(
            status_code=400,
            content=search_service.empty_result(
                "", data.page, data.hitsPerPage, "Invalid query parameter"
            ),
        )

    if not search_service.is_configured():
        return JSONResponse(
            status_code=500,
            content=search_service.empty_result(
                data.query, data.page, data.hitsPerPage, "Search service not configured"
            ),
        )

    try:
        return search_service.search(
            data.indexName, data.query, data.filters, data.page, data.hitsPerPage
        )
    except search_service.SearchServiceError as e:
        logger.error(f"Search failed on {data.indexName}: {e}")
        return JSONResponse(
            status_code=500,
            content=search_service.empty_result(data.query, data.page, data.hitsPerPage, str(e)),
        )
