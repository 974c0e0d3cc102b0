from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    name: str
    avatar: str
    phone_number: str


@dataclass(frozen=True, slots=True)
class NewUser:
    name: str
    phone_number: str
    avatar: str
