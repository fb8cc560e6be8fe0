"""Persistence gateway."""

from .result import GatewayResult
from .local import LocalDraftStore, ONBOARDING_DRAFT_KEY
from .supabase import get_supabase_client, RemoteDocumentStore
from .writes import BackgroundWrites

__all__ = [
    "GatewayResult",
    "LocalDraftStore",
    "ONBOARDING_DRAFT_KEY",
    "get_supabase_client",
    "RemoteDocumentStore",
    "BackgroundWrites",
]
