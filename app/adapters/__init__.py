"""External interfaces: completion backends, anchor metadata and identity."""

from app.adapters.base import (
    AnchorMetadataProvider,
    CompletionGateway,
    IdentityProvider,
)
from app.adapters.anchor_metadata import DatabaseAnchorMetadataProvider
from app.adapters.completion_http import HttpCompletionGateway
from app.adapters.identity import HeaderIdentityProvider, JWTIdentityProvider

__all__ = [
    "AnchorMetadataProvider",
    "CompletionGateway",
    "DatabaseAnchorMetadataProvider",
    "HeaderIdentityProvider",
    "HttpCompletionGateway",
    "IdentityProvider",
    "JWTIdentityProvider",
]
