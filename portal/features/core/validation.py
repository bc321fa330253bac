"""
Centralized form handling for HTML form posts.
"""
from typing import Dict, List, Any, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData


class FormHandler:
    """Form parsing with per-field error collection and standard error responses."""

    def __init__(self, request: Request):
        self.request = request
        self.errors: Dict[str, List[str]] = {}
        self.form_data: Dict[str, Any] = {}
        self.raw_form: Optional[FormData] = None  # Keeps repeated keys (checkbox + hidden input)

    async def parse_form(self) -> Dict[str, Any]:
        """Parse form data and store in form_data."""
        self.raw_form = await self.request.form()
        self.form_data = dict(self.raw_form)
        return self.form_data

    def add_error(self, field: str, message: str):
        """Add validation error for a specific field."""
        self.errors.setdefault(field, []).append(message)

    def merge_errors(self, errors: Dict[str, List[str]]):
        """Add a mapping of field -> messages produced elsewhere."""
        for field, messages in errors.items():
            for message in messages:
                self.add_error(field, message)

    def get_first_error(self) -> Optional[str]:
        """Get the first error message (for toast display)."""
        if not self.errors:
            return None

        first_field = next(iter(self.errors))
        return self.errors[first_field][0]

    def create_error_response(self) -> JSONResponse:
        """Create standardized JSON error response."""
        if not self.errors:
            return JSONResponse(
                status_code=400,
                content={"detail": "Validation failed"}
            )

        return JSONResponse(
            status_code=400,
            content={
                "detail": self.get_first_error(),
                "field_errors": self.errors,
                "type": "validation_error"
            }
        )
