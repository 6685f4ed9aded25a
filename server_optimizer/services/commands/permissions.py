"""
Permission Registry

Decides whether a member may run an optimizer command. Admins may run
everything; other members need `serveroptimizer.admin` or the specific
permission granted in the configuration.
"""

from server_optimizer.common.config import ALL_PERMISSIONS, PERMISSION_ADMIN
from server_optimizer.common.exceptions import PermissionDeniedError
from server_optimizer.common.logging_setup import get_service_logger
from server_optimizer.services.host import Member

logger = get_service_logger("commands.permissions")

PERMISSION_DESCRIPTIONS = {
    "serveroptimizer.admin": "Access to all plugin commands",
    "serveroptimizer.status": "View current FPS status",
    "serveroptimizer.toggle": "Enable/disable dynamic adjustment",
}


class PermissionRegistry:
    """Permission grants per member id"""

    def __init__(self, grants: dict[str, list[str]] | None = None):
        self._grants: dict[str, set[str]] = {}
        for member_id, perms in (grants or {}).items():
            for perm in perms:
                self.grant(member_id, perm)

        logger.info(
            "Permissions registered: " + ", ".join(ALL_PERMISSIONS),
            extra={"members_with_grants": len(self._grants)},
        )

    def grant(self, member_id: str, permission: str) -> None:
        if permission not in ALL_PERMISSIONS:
            logger.warning(f"Ignoring unknown permission {permission} for {member_id}")
            return
        self._grants.setdefault(member_id, set()).add(permission)

    def revoke(self, member_id: str, permission: str) -> None:
        self._grants.get(member_id, set()).discard(permission)

    def has_permission(self, member: Member | None, permission: str) -> bool:
        if member is None:
            return False
        if member.is_admin:
            return True
        granted = self._grants.get(member.member_id, set())
        return PERMISSION_ADMIN in granted or permission in granted

    def require(self, member: Member | None, permission: str) -> None:
        """
        Raises:
            PermissionDeniedError: If member lacks permission
        """
        if not self.has_permission(member, permission):
            raise PermissionDeniedError(
                permission,
                member.member_id if member else None,
            )
