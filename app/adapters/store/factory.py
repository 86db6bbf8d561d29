"""Factory for creating signup store instances."""

from supabase import SupabaseException

from app.adapters.store.base import AbstractSignupStore
from app.adapters.store.in_memory import InMemorySignupStore
from app.adapters.store.supabase_store import SupabaseSignupStore
from app.core.config import StoreSettings, settings
from app.core.errors import ConfigurationAppError


def create_signup_store(store_settings: StoreSettings | None = None) -> AbstractSignupStore:
    """Instantiate the signup store selected by configuration.

    Args:
        store_settings: Optional settings; defaults to ``settings.store``.

    Returns:
        AbstractSignupStore: Configured store instance.

    Raises:
        ConfigurationAppError: If the backend is unknown, its connection
            settings are missing, or the client rejects them.
    """
    cfg = store_settings or settings.store
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemorySignupStore()

    if backend == "supabase":
        if not cfg.supabase_url or not cfg.supabase_key:
            raise ConfigurationAppError(
                code="store_not_configured",
                message="Supabase store requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY",
                details={"backend": backend},
            )
        try:
            return SupabaseSignupStore(
                url=cfg.supabase_url,
                key=cfg.supabase_key,
                table=cfg.table,
            )
        except SupabaseException as exc:
            raise ConfigurationAppError(
                code="store_unavailable",
                message="Supabase client could not be created",
                details={"backend": backend},
            ) from exc

    raise ConfigurationAppError(
        code="store_unknown_backend",
        message=f"Unknown signup store backend: '{backend}'. Supported: supabase, memory",
        details={"backend": backend},
    )
