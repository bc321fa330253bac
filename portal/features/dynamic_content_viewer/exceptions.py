from typing import Dict, List


class FieldCoercionError(ValueError):
    """Submitted form values that could not be converted to their field's type."""

    def __init__(self, field_errors: Dict[str, List[str]]):
        self.field_errors = field_errors
        keys = ", ".join(field_errors)
        super().__init__(f"Invalid values submitted for: {keys}")
