"""
Request schemas for the welfare API.

Each endpoint that accepts a body validates it against one of these
pydantic models before any service code runs. Bodies use camelCase keys
(``welfareNo``, ``loanStatus``); the models expose snake_case attributes.
"""

from datetime import date
from typing import Annotated, List, Literal, Optional

from pydantic import (
    BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator, model_validator
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from welfare.errors import InvalidStatus, ValidationError

LoanStatusValue = Literal['pending', 'approved', 'rejected']
RoleValue = Literal['member', 'admin']

# Passwords are hashed exactly as typed
Password = Annotated[str, StringConstraints(strip_whitespace=False, min_length=6)]
LoginPassword = Annotated[str, StringConstraints(strip_whitespace=False, min_length=1)]


class RequestSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra='ignore',
    )

    def submitted(self):
        """Return only the fields present in the request body, snake_case keyed."""
        return self.model_dump(exclude_unset=True)


# ============================================================
# MEMBERS
# ============================================================

class MemberProfile(RequestSchema):
    date_of_joined: Optional[date] = None
    date_of_birth: Optional[date] = None
    date_of_registered: Optional[date] = None
    payroll: Optional[str] = None
    division: Optional[str] = None
    branch: Optional[str] = None
    unit: Optional[str] = None
    contact_no: Optional[str] = None
    spouse_name: Optional[str] = None
    children: Optional[List[dict]] = None
    mother_name: Optional[str] = None
    mother_age: Optional[int] = Field(None, ge=0)
    father_name: Optional[str] = None
    father_age: Optional[int] = Field(None, ge=0)
    mother_in_law_name: Optional[str] = None
    mother_in_law_age: Optional[int] = Field(None, ge=0)
    father_in_law_name: Optional[str] = None
    father_in_law_age: Optional[int] = Field(None, ge=0)
    member_fee: Optional[float] = Field(None, ge=0)


class MemberCreate(MemberProfile):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: Password
    epf: str = Field(..., min_length=1)
    welfare_no: str = Field(..., min_length=1)
    role: RoleValue = 'member'


class MemberUpdate(MemberProfile):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[Password] = None
    epf: Optional[str] = Field(None, min_length=1)
    welfare_no: Optional[str] = Field(None, min_length=1)
    role: Optional[RoleValue] = None

    @field_validator('name', 'email', 'password', 'epf', 'welfare_no', 'role', mode='before')
    @classmethod
    def reject_null(cls, value, info):
        # These may be left out of an update but never cleared
        if value is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return value


class LoginRequest(RequestSchema):
    epf: Optional[str] = None
    email: Optional[str] = None
    password: LoginPassword

    @model_validator(mode='after')
    def require_identifier(self):
        if not self.epf and not self.email:
            raise ValueError('EPF number or email is required')
        return self


# ============================================================
# LOANS
# ============================================================

class LoanCreate(RequestSchema):
    amount: float = Field(..., gt=0)
    loan_type: Optional[str] = None
    reason: Optional[str] = None
    repayment_period: Optional[int] = Field(None, gt=0)


class LoanUpdate(RequestSchema):
    amount: Optional[float] = Field(None, gt=0)
    loan_type: Optional[str] = None
    reason: Optional[str] = None
    repayment_period: Optional[int] = Field(None, gt=0)
    loan_status: Optional[LoanStatusValue] = None


class LoanStatusUpdate(RequestSchema):
    # Kept as a plain string; the allowed values are checked by the service
    loan_status: Optional[str] = None


# ============================================================
# REFUNDS & SCHOLARSHIPS
# ============================================================

class RefundCreate(RequestSchema):
    benefit: str = Field(..., min_length=1)
    epf: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    reason: Optional[str] = None
    message: Optional[str] = None


class ScholarshipCreate(RequestSchema):
    benefit: str = Field(..., min_length=1)
    member_id: Optional[int] = None
    epf_number: Optional[str] = None
    index_number: Optional[str] = None
    amount: float = Field(..., gt=0)


# ============================================================
# PARSING
# ============================================================

def _describe(errors):
    described = []
    for error in errors:
        location = '.'.join(str(part) for part in error['loc']) or 'body'
        described.append({'field': location, 'message': error['msg']})
    return described


def parse_body(schema, payload):
    """
    Validate a JSON payload against ``schema``.

    Raises welfare.errors.ValidationError (HTTP 400) listing every
    offending field when validation fails.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        errors = _describe(e.errors())
        if schema is LoanUpdate and any(err['field'] == 'loanStatus' for err in errors):
            raise InvalidStatus(errors=errors)
        raise ValidationError(errors[0]['message'] if len(errors) == 1 else None, errors=errors)
