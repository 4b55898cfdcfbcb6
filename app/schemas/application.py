"""
Pydantic schemas for graduate-school application records.
"""
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ApplicationStatus(str, Enum):
    DRAFT = "Draft"
    IN_PROGRESS = "In Progress"
    SUBMITTED = "Submitted"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


SORT_FIELDS = ("deadline", "priority", "tuitionFees", "livingExpenses", "createdAt")

# Keys a client may never write; the store owns them
IMMUTABLE_FIELDS = frozenset({
    "id", "_id", "userId", "user_id", "createdAt", "created_at", "updatedAt", "updated_at",
})

DocumentName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]

UNIVERSITY_ALIASES = AliasChoices("universityName", "university", "university_name")

FIELD_MESSAGES = {
    "universityName": "University name is required and cannot be more than 100 characters",
    "degree": "Degree is required and cannot be more than 50 characters",
    "priority": "Priority must be High, Medium, or Low",
    "numberOfSemesters": "Number of semesters must be between 1 and 20",
    "applicationPortal": "Application portal must be a valid URL",
    "city": "City is required and cannot be more than 50 characters",
    "country": "Country is required and cannot be more than 50 characters",
    "location": "Location is required and cannot be more than 100 characters",
    "startingSemester": "Starting semester is required and cannot be more than 20 characters",
    "tuitionFees": "Tuition fees must be a non-negative number",
    "livingExpenses": "Living expenses must be a non-negative number",
    "documentsRequired": "Document names must be non-empty and at most 100 characters",
    "status": "Status must be Draft, In Progress, Submitted, Accepted, or Rejected",
    "deadline": "Deadline must be a valid date",
    "notes": "Notes cannot be more than 1000 characters",
    "sortBy": "Invalid sort field",
    "sortOrder": "Sort order must be asc or desc",
}

QUERY_MESSAGES = {
    "priority": FIELD_MESSAGES["priority"],
    "status": FIELD_MESSAGES["status"],
    "country": "Country cannot be empty",
    "startingSemester": "Starting semester cannot be empty",
    "sortBy": "Invalid sort field",
    "sortOrder": "Sort order must be asc or desc",
}


def _coerce_deadline(value: Any) -> Any:
    """Accept a full ISO timestamp and keep its date part."""
    if isinstance(value, str) and "T" in value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return value
    return value


class _ApplicationFields(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
        extra="ignore",
    )

    @field_validator("deadline", mode="before", check_fields=False)
    @classmethod
    def parse_deadline(cls, v: Any) -> Any:
        return _coerce_deadline(v)

    @field_validator("number_of_semesters", "tuition_fees", "living_expenses", mode="before", check_fields=False)
    @classmethod
    def reject_bool(cls, v: Any) -> Any:
        # JSON true/false would otherwise coerce to 1/0
        if isinstance(v, bool):
            raise ValueError("must be a number")
        return v


class ApplicationCreate(_ApplicationFields):
    """All fields a client supplies when creating an application."""
    university_name: str = Field(..., min_length=1, max_length=100, validation_alias=UNIVERSITY_ALIASES)
    degree: str = Field(..., min_length=1, max_length=50)
    priority: Priority = Priority.MEDIUM
    number_of_semesters: int = Field(..., ge=1, le=20)
    application_portal: str = Field(..., pattern=r"^https?://.+")
    city: str = Field(..., min_length=1, max_length=50)
    country: str = Field(..., min_length=1, max_length=50)
    location: str = Field(..., min_length=1, max_length=100)
    starting_semester: str = Field(..., min_length=1, max_length=20)
    tuition_fees: float = Field(..., ge=0, allow_inf_nan=False)
    living_expenses: float = Field(..., ge=0, allow_inf_nan=False)
    documents_required: Optional[List[DocumentName]] = None
    status: ApplicationStatus = ApplicationStatus.DRAFT
    deadline: date
    notes: Optional[str] = Field(None, max_length=1000)


class ApplicationUpdate(_ApplicationFields):
    """
    Partial update. Only keys present in the body are validated and written.

    Fields are typed without Optional and default to None, so an omitted key is
    skipped while an explicit null for a required field is a violation.
    """
    university_name: str = Field(None, min_length=1, max_length=100, validation_alias=UNIVERSITY_ALIASES)
    degree: str = Field(None, min_length=1, max_length=50)
    priority: Priority = None
    number_of_semesters: int = Field(None, ge=1, le=20)
    application_portal: str = Field(None, pattern=r"^https?://.+")
    city: str = Field(None, min_length=1, max_length=50)
    country: str = Field(None, min_length=1, max_length=50)
    location: str = Field(None, min_length=1, max_length=100)
    starting_semester: str = Field(None, min_length=1, max_length=20)
    tuition_fees: float = Field(None, ge=0, allow_inf_nan=False)
    living_expenses: float = Field(None, ge=0, allow_inf_nan=False)
    documents_required: Optional[List[DocumentName]] = None
    status: ApplicationStatus = None
    deadline: date = None
    notes: Optional[str] = Field(None, max_length=1000)

    def changes(self) -> Dict[str, Any]:
        """Supplied fields as column values, with nullable fields normalized."""
        data = self.model_dump(exclude_unset=True)
        if "documents_required" in data and data["documents_required"] is None:
            data["documents_required"] = []
        if "notes" in data and data["notes"] is None:
            data["notes"] = ""
        return data


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    university_name: str
    degree: str
    priority: str
    number_of_semesters: int
    application_portal: str
    city: str
    country: str
    location: str
    starting_semester: str
    tuition_fees: float
    living_expenses: float
    documents_required: List[str] = Field(default_factory=list)
    status: str
    deadline: date
    notes: str = ""
    created_at: datetime
    updated_at: datetime


class ApplicationQuery(BaseModel):
    """
    Recognized list options. Anything else in the query string is ignored.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
        extra="ignore",
    )

    priority: Optional[Priority] = None
    status: Optional[ApplicationStatus] = None
    country: Optional[str] = Field(None, min_length=1)
    starting_semester: Optional[str] = Field(None, min_length=1)
    sort_by: Optional[str] = "createdAt"
    sort_order: Optional[str] = "desc"

    @field_validator("sort_by")
    @classmethod
    def check_sort_by(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in SORT_FIELDS:
            raise ValueError("Invalid sort field")
        return v

    @field_validator("sort_order")
    @classmethod
    def check_sort_order(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ("asc", "desc"):
            raise ValueError("Sort order must be asc or desc")
        return v


class ApplicationStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    by_status: Dict[str, int]
    by_priority: Dict[str, int]
    upcoming_deadlines: int
