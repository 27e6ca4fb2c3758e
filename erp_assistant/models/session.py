"""
Session Models

A session is one user of one tenant. It identifies at most one in-flight
(pending) draft. Missing tenant or user identifiers are NOT errors: they
collapse to explicit sentinel values so anonymous callers still get a
stable session key.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


NO_TENANT = "noTenant"
NO_USER = "noUser"


class SessionKey(BaseModel):
    """Composite tenant + user key for the pending-draft store."""
    model_config = ConfigDict(frozen=True)

    tenant: str = NO_TENANT
    user: str = NO_USER

    def __str__(self) -> str:
        return f"{self.tenant}:{self.user}"


class SessionContext(BaseModel):
    """
    Per-message caller context.

    `db_available=False` tells the engine not to even try the tenant
    directory for hint lists.
    """
    model_config = ConfigDict(populate_by_name=True)

    tenant_id: Optional[str] = Field(default=None, alias="tenantId")
    user_id: Optional[str] = Field(default=None, alias="userId")
    db_available: bool = Field(default=True, alias="dbAvailable")

    @property
    def session_key(self) -> SessionKey:
        return SessionKey(
            tenant=str(self.tenant_id) if self.tenant_id else NO_TENANT,
            user=str(self.user_id) if self.user_id else NO_USER,
        )


class Actor(BaseModel):
    """
    The authenticated user submitting a draft.

    `role` is the platform role (super_admin, admin, user);
    `business_role` is the organizational role used for default permissions.
    """
    user_id: Optional[str] = None
    name: Optional[str] = None
    role: str = "user"
    business_role: Optional[str] = None
    permissions: list[str] = Field(default_factory=list)
