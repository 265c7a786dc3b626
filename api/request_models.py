"""Pydantic request bodies. Validation failures surface as 400."""

from pydantic import BaseModel, EmailStr, Field


class CreateEntityRequest(BaseModel):
    id: str = Field(min_length=1, description="Email for persons, slug for groups")
    title: str = Field(min_length=1)
    type: str = Field(pattern="^(person|group)$")
    employee_id: str | None = None
    default_capacity: float | None = Field(
        default=None, ge=0, allow_inf_nan=False, description="Omitted or 0 means 5.0"
    )


class UpdateEntityRequest(BaseModel):
    title: str | None = None
    employee_id: str | None = None
    default_capacity: float | None = Field(default=None, ge=0, allow_inf_nan=False)


class AddGroupMemberRequest(BaseModel):
    person_email: EmailStr


class EmailAssignee(BaseModel):
    email: EmailStr
    weight: float | None = Field(default=None, allow_inf_nan=False, description="Omitted or 0 means 1.0")


class EmployeeAssignee(BaseModel):
    employee_id: str = Field(min_length=1)
    weight: float | None = Field(default=None, allow_inf_nan=False)


class UpsertLoadRequest(BaseModel):
    external_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    source: str | None = None
    url: str | None = Field(default=None, description="Link back to the originating system")
    date: str = Field(description="YYYY-MM-DD")
    assignees: list[EmailAssignee] = Field(default_factory=list)


class UpsertLoadByEmployeeIdRequest(BaseModel):
    external_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    source: str | None = None
    url: str | None = None
    date: str = Field(description="YYYY-MM-DD")
    assignees: list[EmployeeAssignee] = Field(default_factory=list)


class AddAssigneesRequest(BaseModel):
    assignees: list[EmailAssignee] = Field(min_length=1)


class DateOverride(BaseModel):
    date: str = Field(description="YYYY-MM-DD")
    capacity: float = Field(allow_inf_nan=False)


class UpdateCapacityRequest(BaseModel):
    default_capacity: float | None = Field(default=None, allow_inf_nan=False)
    date_overrides: list[DateOverride] = Field(default_factory=list)
