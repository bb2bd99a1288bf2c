from typing import Any, Dict, List


class AuthenticatedUser:
    def __init__(self, id: str, email: str, user_data: Dict[str, Any]):
        self.id = id
        self.email = email
        self.user_data = user_data
        self.is_active = user_data.get("is_active", True)

    def __str__(self):
        return f"User(id={self.id}, email={self.email})"


class ValidatedUser(AuthenticatedUser):
    def __init__(self, id: str, email: str, user_data: Dict[str, Any]):
        super().__init__(id, email, user_data)
        self.role = user_data.get("role")
        self.permissions: List[Dict[str, Any]] = user_data.get("permissions", [])
