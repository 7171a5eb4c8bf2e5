"""
Identity service for request authentication.

The portal sits behind an identity provider that has already verified the
caller; requests carry the provider's principal id in a header. This service
only confirms that the id maps to a known principal.

Behavior:
    authenticate(principal_id) -> principal
    - Missing/blank id    -> AuthError
    - Unknown principal   -> AuthError
    - Unbound member/lead -> returned as-is; the membership graph reports it
"""

from __future__ import annotations

from typing import Any, Optional

from portal.core.contracts import PrincipalRepo
from portal.core.errors import AuthError

__all__ = ["IdentityService"]


class IdentityService:
    """
    Small service resolving the caller's principal from the trusted identity header.
    """

    def __init__(self, principal_repo: PrincipalRepo) -> None:
        self.principal_repo = principal_repo

    def authenticate(self, principal_id: Optional[str]) -> Any:
        """
        Authenticate a request by principal id.

        Args:
            principal_id: Identifier supplied by the identity provider.

        Returns:
            The principal entity (repo-specific type).

        Raises:
            AuthError: If the id is missing or names no known principal.
        """
        if not isinstance(principal_id, str) or not principal_id.strip():
            raise AuthError("Principal identity is required")

        principal = self.principal_repo.get_by_id(principal_id.strip())
        if principal is None:
            raise AuthError("Unknown principal")
        return principal
