from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from recipe_api.api.deps import get_account_service, get_auth_user_id
from recipe_api.schemas import AccountDeleted, RestResponse
from recipe_api.services import AccountService

router = APIRouter(tags=["account"])


@router.post("/delete-account", response_model=RestResponse[AccountDeleted])
async def delete_account(
    auth_user_id: Annotated[UUID, Depends(get_auth_user_id)],
    account_service: Annotated[AccountService, Depends(get_account_service)],
) -> RestResponse[AccountDeleted]:
    """Delete the caller's profile and auth user; imported content is kept anonymously."""
    await account_service.delete_account(auth_user_id)
    return RestResponse[AccountDeleted](success=True, data=AccountDeleted())
