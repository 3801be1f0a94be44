# app/core/dependencies.py
import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import ClerkAuthenticator
from app.database import get_db
from app.domains.chat.service import ChatService
from app.domains.client.service import ClientService
from app.domains.files.bridge import FileContextBridge
from app.domains.files.context_store import FileContextStore
from app.domains.files.resolver import ClientAssociationResolver
from app.domains.files.service import FileStorageService
from app.domains.files.storage import BlobStore
from app.domains.user.service import UserService
from models import User

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401, not 403
security = HTTPBearer(auto_error=False)
auth = ClerkAuthenticator()


async def validate_token(
    token: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    """Validate and decode JWT token from Clerk.

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: If token is missing, invalid or expired
    """
    try:
        if not token or not token.credentials:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication token is required",
                headers={"WWW-Authenticate": "Bearer"},
            )

        # Verify token with Clerk
        payload = await auth.verify_token(token.credentials)

        if not payload:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return payload

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_current_user(
    request: Request,
    payload: dict = Depends(validate_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from JWT payload.

    Returns:
        User: Current authenticated user

    Raises:
        HTTPException: If user not found or inactive
    """
    try:
        clerk_user_id = payload.get("sub")

        if not clerk_user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token payload - missing user ID",
            )

        # Get or create user in local database
        user_service = UserService(db)
        user = await user_service.get_or_create_user(clerk_user_id, payload)

        if not user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive"
            )

        # Add user info to request state for logging
        request.state.user_id = user.id
        request.state.user_type = user.user_type

        return user

    except HTTPException:
        raise
    except Exception as e:
        logger.error("User authentication error: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication service error",
        ) from e


# Provider handles are built once in the application lifespan

def get_blob_store(request: Request) -> BlobStore | None:
    return getattr(request.app.state, "blob_store", None)


def get_file_context_store(request: Request) -> FileContextStore:
    store = getattr(request.app.state, "file_context_store", None)
    if store is None:
        store = FileContextStore()
        request.app.state.file_context_store = store
    return store


def get_file_storage_service(
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore | None = Depends(get_blob_store),
) -> FileStorageService:
    resolver = ClientAssociationResolver(ClientService(db).search_clients_precise)
    return FileStorageService(db, blob_store, resolver=resolver)


def get_file_context_bridge(
    storage: FileStorageService = Depends(get_file_storage_service),
    context_store: FileContextStore = Depends(get_file_context_store),
) -> FileContextBridge:
    return FileContextBridge(storage, context_store)


def get_chat_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
    bridge: FileContextBridge = Depends(get_file_context_bridge),
) -> ChatService:
    resolver = ClientAssociationResolver(ClientService(db).search_clients_precise)
    return ChatService(db, getattr(request.app.state, "chat_model", None), bridge, resolver)
