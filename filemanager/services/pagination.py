"""
Pagination plans for the file listing.

A listing request is either ``Unpaginated`` (every record) or ``Paginated``
(one page, sorted by a whitelisted column). Sort columns are looked up in a
fixed mapping, so no client text ever reaches the ORDER BY clause.
"""
import math
from dataclasses import dataclass
from typing import Union

from sqlalchemy.orm import Query

from filemanager.models.file import File as FileModel
from filemanager.schemas.file import PaginationQuery

ORDER_COLUMNS = {
    "name": FileModel.name,
    "size": FileModel.size,
    "uploaded_at": FileModel.uploaded_at,
}


@dataclass(frozen=True)
class Unpaginated:
    pass


@dataclass(frozen=True)
class Paginated:
    page: int
    limit: int
    order_by: str
    direction: str

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


ListingPlan = Union[Unpaginated, Paginated]


def resolve(query: PaginationQuery) -> Paginated:
    """Turn validated query parameters into a page plan."""
    return Paginated(
        page=query.page,
        limit=query.limit,
        order_by=query.order_by,
        direction=query.direction,
    )


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def apply(query: Query, plan: ListingPlan) -> Query:
    """Apply ordering and the page window of ``plan`` to an ORM query."""
    if isinstance(plan, Unpaginated):
        return query.order_by(FileModel.id.asc())

    column = ORDER_COLUMNS[plan.order_by]
    if plan.direction == "ASC":
        ordering = (column.asc(), FileModel.id.asc())
    else:
        ordering = (column.desc(), FileModel.id.desc())
    return query.order_by(*ordering).offset(plan.offset).limit(plan.limit)
