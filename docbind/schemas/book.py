"""Book Schema: validation for the example `books` collection.

Invariants:
    - title and author are optional strings; unknown fields are dropped on write
"""

from pydantic import BaseModel, ConfigDict, Field


class BookSchema(BaseModel):
    """Fields a stored book may carry."""
    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(None, max_length=500)
    author: str | None = Field(None, max_length=200)
