"""Cursor-based pagination for list queries.

Pages are ordered newest first by (created_at, id). The cursor is an
opaque URL-safe token naming the last row of the previous page, so pages
stay stable while rows are inserted ahead of the reader.
"""

import base64
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from sqlalchemy import and_, or_
from sqlmodel import Session, select

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

STATUS_CAN_LOAD_MORE = "CanLoadMore"
STATUS_EXHAUSTED = "Exhausted"


class InvalidCursorError(ValueError):
    """Raised when a pagination cursor cannot be decoded."""


@dataclass
class PaginationOpts:
    num_items: int = DEFAULT_PAGE_SIZE
    cursor: Optional[str] = None

    def page_size(self) -> int:
        return max(1, min(self.num_items, MAX_PAGE_SIZE))


@dataclass
class PageResult(Generic[T]):
    page: list[T] = field(default_factory=list)
    continue_cursor: str = ""
    is_done: bool = True

    @property
    def status(self) -> str:
        return STATUS_EXHAUSTED if self.is_done else STATUS_CAN_LOAD_MORE


def encode_cursor(created_at: datetime, row_id: UUID) -> str:
    payload = json.dumps({"c": created_at.isoformat(), "i": str(row_id)})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(payload["c"]), UUID(payload["i"])
    except (ValueError, KeyError, TypeError) as e:
        raise InvalidCursorError(f"Invalid pagination cursor: {cursor}") from e


def paginate(
    session: Session,
    model: Any,
    *conditions: Any,
    opts: Optional[PaginationOpts] = None,
) -> PageResult:
    """Return one page of `model` rows matching `conditions`, newest first.

    Args:
        session: Database session
        model: SQLModel table class with created_at and id columns
        *conditions: Filter expressions, typically the parent foreign key
        opts: Page size and continuation cursor

    Returns:
        PageResult with the rows, the cursor for the next page and a
        completion flag

    Raises:
        InvalidCursorError: If the cursor is malformed
    """
    opts = opts or PaginationOpts()
    size = opts.page_size()

    statement = select(model).where(*conditions)
    if opts.cursor:
        created_at, row_id = decode_cursor(opts.cursor)
        statement = statement.where(
            or_(
                model.created_at < created_at,
                and_(model.created_at == created_at, model.id < row_id),
            )
        )
    statement = statement.order_by(model.created_at.desc(), model.id.desc()).limit(
        size + 1
    )

    rows = list(session.exec(statement).all())
    is_done = len(rows) <= size
    rows = rows[:size]

    if rows:
        continue_cursor = encode_cursor(rows[-1].created_at, rows[-1].id)
    else:
        continue_cursor = opts.cursor or ""

    return PageResult(page=rows, continue_cursor=continue_cursor, is_done=is_done)
