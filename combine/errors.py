"""Exception hierarchy for middleware combinators."""
from typing import Any, Dict


class CombineError(Exception):
    """Base exception for all combinator errors."""
    code: str = "CMB_001"

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class ConditionFailedError(CombineError):
    """A unit or condition returned a literal ``False``."""
    code = "CMB_002"

    def __init__(self, combinator: str, unit: str):
        super().__init__(
            f"combine {combinator}() failed: {unit} returned false",
            {"combinator": combinator, "unit": unit},
        )
        self.combinator = combinator
        self.unit = unit


class UnitTypeError(CombineError, TypeError):
    """Something that is not callable was passed where a unit was expected."""
    code = "CMB_003"

    def __init__(self, value: Any):
        super().__init__(
            f"expected a callable unit, got {type(value).__name__}",
            {"type": type(value).__name__},
        )
