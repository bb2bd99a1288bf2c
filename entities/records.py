"""
Raw source records, one tagged model per report kind.

Supabase returns embedded many-to-one relations as an object (or null) and
one-to-many relations as a list; `from_dict` flattens that into typed models.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field

Number = Union[int, float]


def _embedded(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if isinstance(value, list):
        value = value[0] if value else None
    return value or {}


class EmployeeRecord(BaseModel):
    """Row of the employee directory."""
    id: Optional[str] = None
    name: str = ""
    employee_code: Optional[str] = None
    job_title: Optional[str] = None
    branch: Optional[str] = None
    leave_taken: Optional[Number] = None
    remaining_leave_days: Optional[Number] = None
    working_hours: Optional[Number] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmployeeRecord":
        return cls(**{key: data.get(key) for key in cls.model_fields if data.get(key) is not None})


class LeaveEmployee(BaseModel):
    name: Optional[str] = None
    employee_code: Optional[str] = None
    remaining_leave_days: Optional[Number] = None
    branch: Optional[str] = None


class LeaveRecord(BaseModel):
    """A leave request with its employee and leave type resolved."""
    id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    days: Optional[Number] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    manager_notes: Optional[str] = None
    approved_by: Optional[str] = None
    approved_date: Optional[str] = None
    rejected_by: Optional[str] = None
    rejected_date: Optional[str] = None
    employee: LeaveEmployee = Field(default_factory=LeaveEmployee)
    leave_type_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeaveRecord":
        scalars = {
            key: data.get(key)
            for key in cls.model_fields
            if key not in ("employee", "leave_type_name") and data.get(key) is not None
        }
        employee = _embedded(data, "employees")
        return cls(
            **scalars,
            employee=LeaveEmployee(**{k: v for k, v in employee.items() if k in LeaveEmployee.model_fields}),
            leave_type_name=_embedded(data, "leave_types").get("name"),
        )


class TrackedDocument(BaseModel):
    """One tracked document of an employee."""
    id: Optional[str] = None
    document_number: Optional[str] = None
    expiry_date: Optional[str] = None
    country: Optional[str] = None
    nationality_status: Optional[str] = None
    category_name: Optional[str] = None

    @property
    def is_passport(self) -> bool:
        return "passport" in (self.category_name or "").lower()


class DocumentHolderRecord(BaseModel):
    """An employee together with every tracked document."""
    id: Optional[str] = None
    name: str = ""
    branch: Optional[str] = None
    sponsored: bool = False
    twenty_hours: bool = False
    documents: List[TrackedDocument] = Field(default_factory=list)

    @property
    def is_restricted(self) -> bool:
        """Sponsored or limited to twenty working hours."""
        return self.sponsored or self.twenty_hours

    def passport(self) -> Optional[TrackedDocument]:
        return next((doc for doc in self.documents if doc.is_passport), None)

    def document_for(self, category_name: str) -> Optional[TrackedDocument]:
        return next((doc for doc in self.documents if doc.category_name == category_name), None)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentHolderRecord":
        documents = []
        for doc in data.get("document_tracker") or []:
            documents.append(TrackedDocument(
                id=doc.get("id"),
                document_number=doc.get("document_number"),
                expiry_date=doc.get("expiry_date"),
                country=doc.get("country"),
                nationality_status=doc.get("nationality_status"),
                category_name=_embedded(doc, "document_types").get("name"),
            ))
        # Latest expiry first; ties by document number, then id
        documents.sort(key=lambda doc: (doc.document_number or "", doc.id or ""))
        documents.sort(key=lambda doc: doc.expiry_date or "", reverse=True)
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            branch=data.get("branch"),
            sponsored=bool(data.get("sponsored")),
            twenty_hours=bool(data.get("twenty_hours")),
            documents=documents,
        )


class ComplianceRecord(BaseModel):
    """A compliance period record with employee and compliance type resolved."""
    id: Optional[str] = None
    period_identifier: Optional[str] = None
    completion_date: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    employee_name: Optional[str] = None
    employee_branch: Optional[str] = None
    compliance_type_name: Optional[str] = None
    frequency: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComplianceRecord":
        employee = _embedded(data, "employees")
        compliance_type = _embedded(data, "compliance_types")
        return cls(
            id=data.get("id"),
            period_identifier=data.get("period_identifier"),
            completion_date=data.get("completion_date"),
            status=data.get("status"),
            notes=data.get("notes"),
            employee_name=employee.get("name"),
            employee_branch=employee.get("branch"),
            compliance_type_name=compliance_type.get("name"),
            frequency=compliance_type.get("frequency"),
        )


RawRecord = Union[EmployeeRecord, LeaveRecord, DocumentHolderRecord, ComplianceRecord]
