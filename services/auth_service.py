"""
Authentication service: resolves bearer tokens to users with their role and
permissions.
"""

from supabase import Client
from entities.user import User, UserRole
from repositories.user_repository import UserRepository
from common.exceptions import AuthenticationException, SupabaseException
from common.logging import get_logger

logger = get_logger("auth_service")


class AuthService:
    """
    Authentication service using Repository pattern.
    Token validation is delegated to Supabase Auth; role and permissions are
    read through the user repository.
    """

    def __init__(self, supabase_client: Client, user_repository: UserRepository):
        self.supabase = supabase_client
        self.user_repository = user_repository

    async def get_current_user(self, access_token: str) -> User:
        """Resolve the current user from an access token.

        Users without an assigned role get the least privileged one.
        Raises AuthenticationException on failures.
        """
        try:
            user_response = self.supabase.auth.get_user(access_token)

            if user_response is None or user_response.user is None:
                raise AuthenticationException(
                    detail="Invalid or expired token",
                    error_code="INVALID_TOKEN"
                )

            auth_user = user_response.user
            role = await self.user_repository.get_role(auth_user.id)
            permissions = await self.user_repository.list_permissions(auth_user.id)

            return User(
                id=auth_user.id,
                email=auth_user.email,
                role=role or UserRole.USER.value,
                permissions=permissions,
            )

        except (AuthenticationException, SupabaseException):
            raise
        except Exception as e:
            logger.error(f"Get current user failed: {e}", exc_info=True)
            raise AuthenticationException(
                detail="Failed to get current user",
                error_code="GET_CURRENT_USER_FAILED"
            )


# Create service instance (to be used with dependency injection)
def create_auth_service(supabase_client: Client, user_repository: UserRepository) -> AuthService:
    """Factory function to create AuthService instance."""
    return AuthService(supabase_client, user_repository)
