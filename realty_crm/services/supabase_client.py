"""Supabase-backed store with async context manager support."""

from typing import Any, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from realty_crm.services.store import CRMStore
from realty_crm.utils.config import CRMConfig
from realty_crm.utils.errors import StoreError
from realty_crm.utils.logging import get_structured_logger, mask_sensitive_data

logger = get_structured_logger(__name__)

# Default client shared by SupabaseStore.from_env()
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create the default Supabase client from the environment."""
    global _client
    
    if _client is None:
        url = CRMConfig.SUPABASE_URL
        key = CRMConfig.supabase_key()
        
        if not url or not key:
            raise StoreError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) must be set")
        
        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )
        
        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", url=url)
    
    return _client


def reset_supabase_client() -> None:
    """Drop the default client so the next call rebuilds it."""
    global _client
    _client = None


def _error_message(exc: Exception) -> str:
    # postgrest APIError carries the server message on .message
    message = getattr(exc, "message", None)
    return message if isinstance(message, str) and message else str(exc)


class SupabaseClient:
    """Async context manager that hands out a client and logs failures."""
    
    def __init__(self, client: Optional[Client] = None):
        self.client = client
    
    async def __aenter__(self) -> Client:
        if self.client is None:
            self.client = get_supabase_client()
        return self.client
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                error=mask_sensitive_data(str(exc_val)),
                type=exc_type.__name__
            )
        return False


class SupabaseStore(CRMStore):
    """CRMStore over the Supabase PostgREST API."""
    
    def __init__(self, client: Optional[Client] = None):
        self._client = client
    
    @classmethod
    def from_env(cls) -> "SupabaseStore":
        return cls(get_supabase_client())
    
    async def select(
        self,
        table: str,
        match: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        ilike: Optional[tuple[str, str]] = None,
    ) -> list[dict]:
        async with SupabaseClient(self._client) as client:
            try:
                query = client.table(table).select("*")
                for column, value in (match or {}).items():
                    query = query.eq(column, value)
                if ilike:
                    column, term = ilike
                    query = query.ilike(column, f"%{term}%")
                if order_by:
                    query = query.order(order_by, desc=descending)
                result = query.execute()
                return result.data if result.data else []
            except Exception as e:
                raise StoreError(_error_message(e), table=table, operation="select") from e
    
    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        if not rows:
            return []
        async with SupabaseClient(self._client) as client:
            try:
                result = client.table(table).insert(rows).execute()
                return result.data if result.data else []
            except Exception as e:
                raise StoreError(_error_message(e), table=table, operation="insert") from e
    
    async def update(self, table: str, values: dict[str, Any], match: dict[str, Any]) -> list[dict]:
        async with SupabaseClient(self._client) as client:
            try:
                query = client.table(table).update(values)
                for column, value in match.items():
                    query = query.eq(column, value)
                result = query.execute()
                return result.data if result.data else []
            except Exception as e:
                raise StoreError(_error_message(e), table=table, operation="update") from e
    
    async def delete(self, table: str, match: dict[str, Any]) -> None:
        if not match:
            raise StoreError("Refusing to delete without a filter", table=table, operation="delete")
        async with SupabaseClient(self._client) as client:
            try:
                query = client.table(table).delete()
                for column, value in match.items():
                    query = query.eq(column, value)
                query.execute()
            except Exception as e:
                raise StoreError(_error_message(e), table=table, operation="delete") from e
    
    async def count(self, table: str, match: Optional[dict[str, Any]] = None) -> int:
        async with SupabaseClient(self._client) as client:
            try:
                query = client.table(table).select("*", count="exact", head=True)
                for column, value in (match or {}).items():
                    query = query.eq(column, value)
                result = query.execute()
                return result.count or 0
            except Exception as e:
                raise StoreError(_error_message(e), table=table, operation="count") from e
