"""
Catalog entities: the externally managed lookup lists that shape reports.
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class Frequency(str, Enum):
    """Declared completion frequency of a compliance type."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    BI_ANNUAL = "bi-annual"
    ANNUAL = "annual"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Frequency"]:
        """Case-insensitive lookup; unknown or blank values yield None."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Category(BaseModel):
    """A registered document category (row of `document_types`)."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(id=str(data["id"]), name=data.get("name") or "")


class Branch(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Branch":
        return cls(id=str(data["id"]), name=data.get("name") or "")


class LeaveType(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeaveType":
        return cls(id=str(data["id"]), name=data.get("name") or "")


class ComplianceType(BaseModel):
    """A compliance task type and its declared frequency."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    frequency: Optional[str] = Field(None, description="Raw frequency as stored, e.g. 'Monthly'")

    @property
    def frequency_kind(self) -> Optional[Frequency]:
        return Frequency.parse(self.frequency)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComplianceType":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            frequency=data.get("frequency"),
        )
