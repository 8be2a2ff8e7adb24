"""
Structural validation of application input.

Turns an arbitrary input value into a typed ApplicationInput, or into a
mapping of field name (camelCase) -> messages. Every field is checked and
every failure is collected.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from visa_fees.domain.entities import Application, StructuralValidationError
from visa_fees.domain.value_objects import is_valid_passport_number

# Attribute name -> wire name
FIELD_KEYS = {
    "id": "id",
    "full_name": "fullName",
    "passport_number": "passportNumber",
    "address": "address",
    "application_date": "applicationDate",
    "amount_paid": "amountPaid",
}

REQUIRED_MESSAGES = {
    "id": "Application id is required.",
    "fullName": "Full name is required.",
    "passportNumber": "Passport number is required.",
    "address": "Address is required.",
    "applicationDate": "An application date is required.",
    "amountPaid": "Amount is required.",
}

# Used when the value has the wrong type or cannot be coerced
TYPE_MESSAGES = {
    "id": "Application id must be a string.",
    "fullName": "Full name must be a string.",
    "passportNumber": "Passport number must be a string.",
    "address": "Address must be a string.",
    "applicationDate": "Please enter a valid date.",
    "amountPaid": "Amount must be a number.",
}

# Error types raised by the validators below; their messages are used verbatim
CUSTOM_ERROR_TYPES = {"too_short", "passport_format", "not_positive", "date_required", "date_type"}


class ApplicationInput(BaseModel):
    """Application as submitted by the form (id optional)"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    full_name: str = Field(alias="fullName")
    passport_number: str = Field(alias="passportNumber")
    address: str
    application_date: date = Field(alias="applicationDate")
    amount_paid: float = Field(alias="amountPaid", allow_inf_nan=False)

    @field_validator("full_name")
    @classmethod
    def _full_name_length(cls, value: str) -> str:
        if len(value) < 3:
            raise PydanticCustomError("too_short", "Full name must be at least 3 characters.")
        return value

    @field_validator("passport_number")
    @classmethod
    def _passport_format(cls, value: str) -> str:
        if not is_valid_passport_number(value):
            raise PydanticCustomError("passport_format", "Please enter a valid passport number.")
        return value

    @field_validator("address")
    @classmethod
    def _address_length(cls, value: str) -> str:
        if len(value) < 5:
            raise PydanticCustomError("too_short", "Address must be at least 5 characters.")
        return value

    @field_validator("application_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        if value is None or value == "":
            raise PydanticCustomError("date_required", "An application date is required.")
        if isinstance(value, datetime):
            return value.date()
        if not isinstance(value, (str, date)) or (isinstance(value, str) and value.strip().lstrip("-").isdigit()):
            # pydantic would read numbers (and numeric strings) as Unix timestamps
            raise PydanticCustomError("date_type", "Please enter a valid date.")
        if isinstance(value, str) and len(value) > 10:
            # Full ISO timestamp, e.g. from Date.toISOString()
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
            except ValueError:
                return value
        return value

    @field_validator("amount_paid")
    @classmethod
    def _amount_positive(cls, value: float) -> float:
        if not value > 0:
            raise PydanticCustomError("not_positive", "Amount must be greater than 0.")
        return value

    def to_entity(self) -> Application:
        """Build a new domain Application; the store assigns its id"""
        return Application(
            full_name=self.full_name,
            passport_number=self.passport_number,
            address=self.address,
            application_date=self.application_date,
            amount_paid=self.amount_paid,
        )

    def changes(self) -> Dict[str, object]:
        """Attribute values to merge into a stored application"""
        return self.model_dump(exclude={"id"})


class ApplicationUpdateInput(ApplicationInput):
    """Application as submitted by the edit form (id required)"""

    id: str


def flatten_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """
    Convert a pydantic ValidationError into field -> messages.

    Errors not tied to a field (e.g. input is not an object) go to "root".
    """
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        if loc:
            key = FIELD_KEYS.get(str(loc[0]), str(loc[0]))
        else:
            key = "root"
        errors.setdefault(key, []).append(_message_for(key, error))
    return errors


def _message_for(key: str, error: Dict[str, Any]) -> str:
    error_type = error.get("type", "")
    if error_type in CUSTOM_ERROR_TYPES:
        return error["msg"]
    if key == "root":
        return "Invalid application data: expected an object."
    if error_type == "missing":
        return REQUIRED_MESSAGES.get(key, f"{key} is required.")
    return TYPE_MESSAGES.get(key, error.get("msg", "Invalid value."))


def validate_application_input(data: Any, require_id: bool = False) -> ApplicationInput:
    """
    Validate raw input against the application schema.

    Args:
        data: Anything; normally a dict with camelCase or snake_case keys
        require_id: True for updates (id must be present)

    Returns:
        Typed ApplicationInput

    Raises:
        StructuralValidationError: With every field failure collected
    """
    model = ApplicationUpdateInput if require_id else ApplicationInput
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise StructuralValidationError(flatten_errors(e)) from e
