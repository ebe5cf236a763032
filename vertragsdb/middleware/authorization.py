from fastapi import Depends, HTTPException, status

from vertragsdb.middleware.auth import get_current_user
from vertragsdb.models.user import Role  # noqa: F401


def require_roles(*allowed_roles: Role):
    """
    FastAPI dependency factory for role-based access control.

    Usage:
        @router.post("/contracts")
        async def create_contract(
            current_user: dict = Depends(get_current_user),
            _auth: None = Depends(require_roles(Role.ADMIN)),
        ):
    """
    async def check_role(current_user: dict = Depends(get_current_user)):
        if current_user["role"] not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": {
                        "code": "INSUFFICIENT_PERMISSIONS",
                        "message": (
                            f"Role '{current_user['role'].value}' cannot perform this action. "
                            f"Required: {[r.value for r in allowed_roles]}"
                        ),
                    }
                },
            )
        return None

    return check_role


require_admin = require_roles(Role.ADMIN)


def check_self_deletion(actor_id: int, target_user_id: int):
    """Prevent an admin from deleting their own account."""
    if int(actor_id) == int(target_user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": {
                    "code": "USER_SELF_DELETE",
                    "message": "You cannot delete your own account",
                }
            },
        )
