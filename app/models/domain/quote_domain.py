"""
Domain models for two-part moving-quote submissions.

A QuoteRecord is the reconciled form of one customer's request and maps
one-to-one onto a sheet row. Submissions arrive as either a Phase1Request
or a Phase2Request; the `part` marker is the discriminator.
"""

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MoveScope(str, Enum):
    LOCAL = "Local"
    DOMESTIC = "Domestic"
    INTERNATIONAL = "International"


class SubmissionPhase(str, Enum):
    PART_1 = "1"
    PART_2 = "2"


# Geography fields that are meaningful for each move scope
SCOPE_FIELDS: dict[MoveScope, tuple[str, ...]] = {
    MoveScope.LOCAL: ("current_address", "new_address"),
    MoveScope.DOMESTIC: ("current_city", "new_city"),
    MoveScope.INTERNATIONAL: (
        "current_country",
        "from_city_international",
        "new_country",
        "to_city_international",
    ),
}

PHASE1_REQUIRED_FIELDS = ("name", "phone_country_code", "phone_number", "move_scope", "moving_date")


class QuoteRecord(BaseModel):
    """One stored quote request. Absent values are empty strings."""

    model_config = ConfigDict(validate_assignment=True)

    session_id: str = ""
    created_at: str = ""

    # Contact
    name: str = ""
    phone: str = ""
    email: str = ""

    move_scope: str = ""

    # Logistics
    home_type_details: str = ""
    vehicle_selection: str = ""
    moving_date: str = ""
    requirements: str = ""

    # Scope details
    current_address: str = ""
    new_address: str = ""
    current_city: str = ""
    new_city: str = ""
    current_country: str = ""
    from_city_international: str = ""
    new_country: str = ""
    to_city_international: str = ""

    estimated_cost: str = ""
    distance: str = ""

    # Split phone as submitted; never stored in its own column
    phone_country_code: str = Field(default="", exclude=True)
    phone_number: str = Field(default="", exclude=True)

    def scope(self) -> MoveScope | None:
        try:
            return MoveScope(self.move_scope)
        except ValueError:
            return None

    def scope_details(self) -> dict[str, str]:
        """Geography fields relevant to the record's move scope."""
        scope = self.scope()
        if scope is None:
            return {}
        return {field: getattr(self, field) for field in SCOPE_FIELDS[scope]}

    def has_email(self) -> bool:
        return bool(self.email.strip())


class QuoteFormData(BaseModel):
    """Partial form payload. Every field is optional at this level."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    phone_country_code: str | None = None
    phone_number: str | None = None
    email: str | None = None
    move_scope: MoveScope | None = None
    home_type_details: str | None = None
    vehicle_selection: str | None = None
    moving_date: str | None = None
    requirements: str | None = None
    current_address: str | None = None
    new_address: str | None = None
    current_city: str | None = None
    new_city: str | None = None
    current_country: str | None = None
    from_city_international: str | None = None
    new_country: str | None = None
    to_city_international: str | None = None
    estimated_cost: str | None = None
    distance: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_scalars(cls, value: Any) -> Any:
        # Cost and distance come from the browser as numbers
        if isinstance(value, bool):
            return value
        if isinstance(value, int | float):
            return str(value)
        return value

    @field_validator("move_scope", mode="before")
    @classmethod
    def _blank_scope_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def supplied(self) -> dict[str, str]:
        """Fields carrying a non-blank value, as plain strings."""
        values = {}
        for field, value in self:
            if value is None:
                continue
            text = value.value if isinstance(value, Enum) else value
            if text.strip():
                values[field] = text
        return values


class Phase1FormData(QuoteFormData):
    """Part 1 payload: contact, scope and date are mandatory."""

    @model_validator(mode="after")
    def _require_contact_fields(self) -> "Phase1FormData":
        supplied = self.supplied()
        missing = [field for field in PHASE1_REQUIRED_FIELDS if field not in supplied]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        return self


class Phase1Request(BaseModel):
    part: Literal["1"]
    data: Phase1FormData

    @property
    def phase(self) -> SubmissionPhase:
        return SubmissionPhase.PART_1


class Phase2Request(BaseModel):
    part: Literal["2"]
    data: QuoteFormData

    @property
    def phase(self) -> SubmissionPhase:
        return SubmissionPhase.PART_2


QuoteSubmission = Annotated[Phase1Request | Phase2Request, Field(discriminator="part")]
