from recipe_api.models.base import Base
from recipe_api.models.imported_content import ImportedContent, ImportStatus
from recipe_api.models.user_profile import UserProfile

__all__ = ["Base", "ImportedContent", "ImportStatus", "UserProfile"]
