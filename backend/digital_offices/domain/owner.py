"""
Provider ownership for services and bookings.

A Service (and every Booking placed against it) is owned by exactly one
provider: an Expert or an Organization. Persistence keeps two nullable
foreign keys; everything above the model layer works with ``Owner``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Union


class ProviderType(str, Enum):
    """Kinds of accounts that can own services and receive bookings."""

    EXPERT = "expert"
    ORGANIZATION = "organization"


@dataclass(frozen=True)
class ExpertOwner:
    id: str
    kind: Literal[ProviderType.EXPERT] = ProviderType.EXPERT

    @property
    def expert_id(self) -> Optional[str]:
        return self.id

    @property
    def organization_id(self) -> Optional[str]:
        return None

    @property
    def has_availability(self) -> bool:
        return True


@dataclass(frozen=True)
class OrganizationOwner:
    id: str
    kind: Literal[ProviderType.ORGANIZATION] = ProviderType.ORGANIZATION

    @property
    def expert_id(self) -> Optional[str]:
        return None

    @property
    def organization_id(self) -> Optional[str]:
        return self.id

    @property
    def has_availability(self) -> bool:
        # Organizations have no weekly schedule and are always bookable.
        return False


Owner = Union[ExpertOwner, OrganizationOwner]


def owner_from_columns(expert_id: Optional[str], organization_id: Optional[str]) -> Owner:
    """
    Build an Owner from the persisted foreign-key pair.

    Raises:
        ValueError: If both or neither of the columns are set
    """
    if expert_id and organization_id:
        raise ValueError("Owner cannot be both an expert and an organization")
    if expert_id:
        return ExpertOwner(expert_id)
    if organization_id:
        return OrganizationOwner(organization_id)
    raise ValueError("Owner must be an expert or an organization")


def make_owner(provider_type: ProviderType | str, provider_id: str) -> Owner:
    """Build an Owner from a provider type tag and id."""
    kind = ProviderType(provider_type)
    if kind is ProviderType.EXPERT:
        return ExpertOwner(provider_id)
    return OrganizationOwner(provider_id)


def lock_key(owner: Owner) -> str:
    """Stable key used for per-provider serialization."""
    return f"{owner.kind.value}:{owner.id}"
