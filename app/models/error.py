"""Error body shared by every non-2xx response."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """``type`` is a stable identifier clients can branch on; ``message`` is
    meant for humans."""

    type: str
    message: str
