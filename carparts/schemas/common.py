from typing import Any

from pydantic import BaseModel


class Page(BaseModel):
    items: list[dict[str, Any]]
    page: int
    limit: int
    total: int
    pages: int
