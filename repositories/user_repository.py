"""
User access repository: roles and explicit permissions.
"""

from typing import List, Optional

from repositories.base import SupabaseRepository
from entities.user import UserPermission
from common.logging import get_logger

logger = get_logger("user_repository")


class UserRepository(SupabaseRepository):
    """
    Reads a user's role and page/feature permissions from Supabase.
    """

    def __init__(
        self,
        supabase_client,
        user_roles_table: str = "user_roles",
        user_permissions_table: str = "user_permissions",
    ):
        super().__init__(supabase_client)
        self.user_roles_table = user_roles_table
        self.user_permissions_table = user_permissions_table

    async def get_role(self, user_id: str) -> Optional[str]:
        """The user's role, or None when no role has been assigned."""
        query = self.supabase.table(self.user_roles_table)\
            .select("role")\
            .eq("user_id", user_id)
        rows = self._execute(query, self.user_roles_table, "get role")
        if not rows:
            return None
        return rows[0].get("role")

    async def list_permissions(self, user_id: str) -> List[UserPermission]:
        query = self.supabase.table(self.user_permissions_table)\
            .select("permission_type, permission_key, granted")\
            .eq("user_id", user_id)
        rows = self._execute(query, self.user_permissions_table, "list permissions")
        logger.debug(f"Loaded {len(rows)} permissions for user {user_id}")
        return [UserPermission.from_dict(row) for row in rows]
