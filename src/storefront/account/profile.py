"""User profiles and the owner role used to gate dashboard actions."""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import Unauthorized


class Role(Enum):
    OWNER = "owner"
    CUSTOMER = "customer"


@storefront.aggregate
class Profile:
    user_id = Identifier(required=True, unique=True)
    full_name = String(max_length=150)
    role = String(choices=Role, default=Role.CUSTOMER.value)
    created_at = DateTime()

    @classmethod
    def create(cls, user_id, role=Role.CUSTOMER.value, full_name=None):
        return cls(
            user_id=user_id,
            full_name=full_name,
            role=role,
            created_at=datetime.now(UTC),
        )

    @property
    def is_owner(self) -> bool:
        return self.role == Role.OWNER.value


@storefront.repository(part_of=Profile)
class ProfileRepository:
    def find_by_user_id(self, user_id) -> Profile | None:
        results = self._dao.query.filter(user_id=user_id).all().items
        return results[0] if results else None


def require_owner(actor_id) -> Profile:
    """Return the actor's profile, or raise ``Unauthorized`` unless it has the owner role."""
    if not actor_id:
        raise Unauthorized()

    profile = current_domain.repository_for(Profile).find_by_user_id(str(actor_id))

    if profile is None or not profile.is_owner:
        raise Unauthorized()
    return profile
