"""API dependencies for dependency injection."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rfp_intake.api.auth import CallerIdentity, IdentityProvider, JWTIdentityProvider
from rfp_intake.config import get_settings
from rfp_intake.errors import AuthenticationError
from rfp_intake.ingestion.upload import UploadService
from rfp_intake.services.analysis import AnalysisService
from rfp_intake.services.container import ServiceContainer, get_container

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_identity_provider() -> IdentityProvider:
    """Get or create the token validator."""
    return JWTIdentityProvider.from_settings(get_settings())


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]
IdentityProviderDep = Annotated[IdentityProvider, Depends(get_identity_provider)]


def get_current_identity(
    provider: IdentityProviderDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> CallerIdentity:
    """Authenticate the caller from the Authorization header."""
    if credentials is None:
        raise AuthenticationError("Missing authentication credentials")
    return provider.authenticate(credentials.credentials)


def get_upload_service(container: ContainerDep) -> UploadService:
    """Get the upload service."""
    return container.uploads


def get_analysis_service(container: ContainerDep) -> AnalysisService:
    """Get the analysis query service."""
    return container.analysis


# Type aliases for dependency injection
IdentityDep = Annotated[CallerIdentity, Depends(get_current_identity)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
