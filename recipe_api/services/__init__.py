from recipe_api.services.account import AccountService
from recipe_api.services.auth import AuthPolicy, SupabaseAuthClient
from recipe_api.services.canonical import Canonicalizer, default_rules
from recipe_api.services.content_store import ContentStore, SqlContentStore
from recipe_api.services.extraction import ExtractionClient
from recipe_api.services.importer import ImportResult, RecipeImporter
from recipe_api.services.resolver import UrlResolver
from recipe_api.services.retry import RetryPolicy, retry_async

__all__ = [
    "AccountService",
    "AuthPolicy",
    "Canonicalizer",
    "ContentStore",
    "ExtractionClient",
    "ImportResult",
    "RecipeImporter",
    "RetryPolicy",
    "SqlContentStore",
    "SupabaseAuthClient",
    "UrlResolver",
    "default_rules",
    "retry_async",
]
