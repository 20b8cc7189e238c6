from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Region


@dataclass(frozen=True)
class MainBranch:
    """Top level of the organization (one per region/state association)."""

    id: int
    name: str
    region: Optional[Region] = None
    person_in_charge: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SubBranch:
    id: int
    name: str
    state: Optional[str] = None
    address: Optional[str] = None
    person_in_charge: Optional[int] = None
    main_branch_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Classroom:
    id: int
    name: str
    sub_branch_id: int
    state: Optional[str] = None
    address: Optional[str] = None
    person_in_charge: Optional[int] = None
    created_at: Optional[datetime] = None


MAIN_BRANCH_FIELDS = ("name", "region", "person_in_charge")
SUB_BRANCH_FIELDS = ("name", "state", "address", "person_in_charge", "main_branch_id")
CLASSROOM_FIELDS = ("name", "state", "address", "person_in_charge", "sub_branch_id")
