from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a registered student.

    `id` is the database key used by every foreign key; `student_id` is the
    human-facing student code printed on cards and typed into search boxes.
    """

    id: int
    student_id: str
    chinese_name: Optional[str] = None
    english_name: Optional[str] = None
    gender: Optional[str] = None
    date_of_joining: Optional[date] = None
    status: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    year_of_birth: Optional[int] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_number: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    profession: Optional[str] = None
    education_level: Optional[str] = None
    marital_status: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.chinese_name or self.english_name or self.student_id


# Columns a client may write, in table order.
STUDENT_FIELDS = (
    "student_id",
    "chinese_name",
    "english_name",
    "gender",
    "date_of_joining",
    "status",
    "email",
    "phone",
    "state",
    "postcode",
    "year_of_birth",
    "emergency_contact_name",
    "emergency_contact_number",
    "emergency_contact_relationship",
    "profession",
    "education_level",
    "marital_status",
)

# Field names used by the old front-end forms, mapped onto stored columns.
STUDENT_FIELD_ALIASES = {
    "enrollment_date": "date_of_joining",
    "postal_code": "postcode",
    "occupation": "profession",
    "academic_level": "education_level",
    "marriage_status": "marital_status",
    "maritial_status": "marital_status",
    "emergency_contact_relation": "emergency_contact_relationship",
    "emergency_contact_phone": "emergency_contact_number",
}
