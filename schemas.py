"""
Database Schemas

Pydantic models for the donor registry. The ``Donor`` model mirrors the
documents stored in the ``donor`` MongoDB collection; field names are
snake_case in Python and camelCase on the wire and in the database:
- blood_group -> "bloodGroup"
- phone_number -> "phoneNumber"
- created_at -> "createdAt"

Field rules (required fields, Gmail-only email, phone and Facebook formats)
live in ``validation.py`` so the same checks back both the pre-submission
endpoint and the store.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional
from datetime import datetime

# ---------------- Blood Donor Registry Schemas -----------------

BloodGroup = Literal[
    "A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"
]

BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DonorCreate(CamelModel):
    """Candidate donor submitted by the registration form.

    Every field is optional here so that missing or malformed values are
    reported together by ``validation.check_donor`` instead of one at a time.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    name: Optional[str] = Field(None, description="Full name")
    location: Optional[str] = Field(None, description="City/Area")
    email: Optional[str] = Field(None, description="Gmail address")
    blood_group: Optional[str] = Field(None, description="One of A+, A-, B+, B-, AB+, AB-, O+, O-")
    phone_number: Optional[str] = Field(None, description="11 digit phone number")
    facebook_profile_url: Optional[str] = Field(None, description="Facebook profile link")
    last_donated_date: Optional[str] = Field(None, description="ISO date of the last donation")


class Donor(CamelModel):
    id: str = Field(..., description="Donor ObjectId as string")
    name: str
    location: str
    email: str
    blood_group: BloodGroup
    phone_number: Optional[str] = None
    facebook_profile_url: Optional[str] = None
    last_donated_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ValidationReport(BaseModel):
    valid: bool
    errors: List[str] = []


class ClearResult(BaseModel):
    message: str
    deleted: int
