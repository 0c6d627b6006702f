from pydantic import BaseModel


class FieldError(BaseModel):
    """Individual validation error"""
    field: str  # title, field_<id>, ...
    code: str  # required, type, min, max, max_length, choice, pattern, etc.
    message: str


class ValidationPreviewResponse(BaseModel):
    """Response from validation preview endpoint"""
    valid: bool
    errors: list[FieldError]
    warnings: list[str]  # Non-blocking warnings
