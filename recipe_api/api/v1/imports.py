import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from recipe_api.api.deps import (
    get_content_store,
    get_importer,
    get_optional_auth_user_id,
    resolve_profile_id,
)
from recipe_api.schemas import ImportedContentData, ImportRequest, RestResponse
from recipe_api.services import RecipeImporter
from recipe_api.services.content_store import ContentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["imports"])


@router.post("/import-recipe", response_model=RestResponse[ImportedContentData])
async def import_recipe(
    payload: ImportRequest,
    auth_user_id: Annotated[Optional[UUID], Depends(get_optional_auth_user_id)],
    store: Annotated[ContentStore, Depends(get_content_store)],
    importer: Annotated[RecipeImporter, Depends(get_importer)],
) -> JSONResponse:
    """Import a recipe from a URL, reusing earlier extractions of the same content."""
    profile_id = await resolve_profile_id(store, auth_user_id, payload.email)
    result = await importer.import_url(payload.url, user_id=profile_id, email=payload.email)
    return JSONResponse(status_code=result.status_code, content=result.body)
