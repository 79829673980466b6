from recipe_api.schemas.account import AccountDeleted
from recipe_api.schemas.envelope import RestResponse
from recipe_api.schemas.imports import ImportedContentData, ImportRequest

__all__ = [
    "AccountDeleted",
    "ImportedContentData",
    "ImportRequest",
    "RestResponse",
]
