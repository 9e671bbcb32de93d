import logging
import math
import re
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from carparts.query import BuiltQuery, FilterRequest, build_search
from carparts.schemas.common import Page

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$(\d+)")


def to_named(sql: str, params: list[Any]) -> tuple[str, dict[str, Any]]:
    """Rewrite `$n` placeholders into SQLAlchemy `:pn` binds so any driver can run them."""
    named_sql = _PLACEHOLDER.sub(lambda m: f":p{m.group(1)}", sql)
    return named_sql, {f"p{i}": value for i, value in enumerate(params, start=1)}


class SearchExecutor:
    """Runs built search queries on a session and assembles the pagination envelope."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    def dialect(self) -> str:
        return self.db.get_bind().dialect.name

    async def run(self, built: BuiltQuery) -> Page:
        count_sql, count_binds = to_named(built.count_sql, built.count_params)
        total = (await self.db.execute(text(count_sql), count_binds)).scalar_one()

        sql, binds = to_named(built.sql, built.params)
        result = await self.db.execute(text(sql), binds)
        items = [dict(row) for row in result.mappings().all()]

        logger.debug(f"Search returned {len(items)} of {total} rows (page {built.page})")
        return Page(
            items=items,
            page=built.page,
            limit=built.limit,
            total=total,
            pages=math.ceil(total / built.limit),
        )

    async def search(self, request: FilterRequest) -> Page:
        return await self.run(build_search(request, dialect=self.dialect))
