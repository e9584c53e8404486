from typing import Optional

from pydantic import BaseModel


class CommandResult(BaseModel):
    """Outcome of a browser command, shaped for the JSON response."""

    success: bool = True
    url: str
    screenshot: Optional[str] = None
    result: Optional[str] = None
