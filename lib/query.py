"""
Query specification for single-table reads.

A QuerySpec is an ordered list of predicates plus ordering and pagination.
Storage clients either compile it to SQL (compile_select / compile_count)
or evaluate it directly against dict rows (apply_to_rows), so filter and
pagination semantics live here and not in any particular client.
"""
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

from lib.models import INFLUENCER_COLUMNS

# Tables a spec may target, with the columns it may reference
TABLE_COLUMNS = {
    "influencers": INFLUENCER_COLUMNS,
}


@dataclass(frozen=True)
class Eq:
    """column = value"""
    column: str
    value: Any


@dataclass(frozen=True)
class AnyILike:
    """Case-insensitive substring match on any of the columns"""
    columns: tuple[str, ...]
    term: str


Predicate = Union[Eq, AnyILike]


@dataclass
class QuerySpec:
    table: str
    predicates: list[Predicate] = field(default_factory=list)
    order_by: Optional[str] = None
    descending: bool = False
    offset: int = 0
    limit: Optional[int] = None
    count_exact: bool = False

    def where_eq(self, column: str, value: Any) -> "QuerySpec":
        self.predicates.append(Eq(column, value))
        return self

    def where_any_ilike(self, columns: Iterable[str], term: str) -> "QuerySpec":
        self.predicates.append(AnyILike(tuple(columns), term))
        return self

    def order(self, column: str, descending: bool = False) -> "QuerySpec":
        self.order_by = column
        self.descending = descending
        return self

    def range(self, start: int, end: int) -> "QuerySpec":
        """Inclusive row range, e.g. range(0, 9) is the first ten rows"""
        self.offset = start
        self.limit = max(end - start + 1, 0)
        return self

    def page(self, page: int, limit: int) -> "QuerySpec":
        """1-based page of `limit` rows"""
        start = (page - 1) * limit
        return self.range(start, start + limit - 1)

    def with_count(self, exact: bool = True) -> "QuerySpec":
        self.count_exact = exact
        return self

    def columns(self) -> tuple[str, ...]:
        try:
            return TABLE_COLUMNS[self.table]
        except KeyError:
            raise ValueError(f"Unknown table: {self.table}") from None


# ============================================================================
# SQL compilation (asyncpg positional parameters)
# ============================================================================

def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _check_column(spec: QuerySpec, column: str) -> str:
    if column not in spec.columns():
        raise ValueError(f"Unknown column for {spec.table}: {column}")
    return column


def _compile_where(spec: QuerySpec) -> tuple[str, list[Any]]:
    clauses = []
    args: list[Any] = []

    for predicate in spec.predicates:
        if isinstance(predicate, Eq):
            args.append(predicate.value)
            clauses.append(f"{_check_column(spec, predicate.column)} = ${len(args)}")
        elif isinstance(predicate, AnyILike):
            if not predicate.columns:
                continue
            args.append(f"%{escape_like(predicate.term)}%")
            placeholder = f"${len(args)}"
            ors = " OR ".join(
                f"{_check_column(spec, column)} ILIKE {placeholder}"
                for column in predicate.columns
            )
            clauses.append(f"({ors})")
        else:
            raise TypeError(f"Unsupported predicate: {predicate!r}")

    if not clauses:
        return "", args
    return " WHERE " + " AND ".join(clauses), args


def compile_select(spec: QuerySpec) -> tuple[str, list[Any]]:
    """SELECT for the requested page"""
    where, args = _compile_where(spec)
    sql = f"SELECT {', '.join(spec.columns())} FROM {spec.table}{where}"

    if spec.order_by:
        direction = "DESC" if spec.descending else "ASC"
        sql += f" ORDER BY {_check_column(spec, spec.order_by)} {direction} NULLS LAST"

    if spec.offset:
        args.append(spec.offset)
        sql += f" OFFSET ${len(args)}"
    if spec.limit is not None:
        args.append(spec.limit)
        sql += f" LIMIT ${len(args)}"

    return sql, args


def compile_count(spec: QuerySpec) -> tuple[str, list[Any]]:
    """COUNT(*) over the same predicates, ignoring pagination"""
    where, args = _compile_where(spec)
    return f"SELECT COUNT(*) FROM {spec.table}{where}", args


# ============================================================================
# In-process evaluation
# ============================================================================

def matches(spec: QuerySpec, row: dict[str, Any]) -> bool:
    """True when the row satisfies every predicate"""
    for predicate in spec.predicates:
        if isinstance(predicate, Eq):
            if row.get(predicate.column) != predicate.value:
                return False
        elif isinstance(predicate, AnyILike):
            if not predicate.columns:
                continue
            needle = predicate.term.casefold()
            if not any(
                needle in str(row.get(column) or "").casefold()
                for column in predicate.columns
            ):
                return False
        else:
            raise TypeError(f"Unsupported predicate: {predicate!r}")
    return True


def apply_to_rows(
    spec: QuerySpec, rows: Iterable[dict[str, Any]]
) -> tuple[list[dict[str, Any]], Optional[int]]:
    """Filter, order and slice rows; returns (page, exact count or None)"""
    selected = [row for row in rows if matches(spec, row)]

    if spec.order_by:
        column = _check_column(spec, spec.order_by)
        present = [row for row in selected if row.get(column) is not None]
        missing = [row for row in selected if row.get(column) is None]
        present.sort(key=lambda row: row[column], reverse=spec.descending)
        # NULLS LAST, as compiled for SQL
        selected = present + missing

    count = len(selected) if spec.count_exact else None

    start = max(spec.offset, 0)
    if spec.limit is None:
        page = selected[start:]
    else:
        page = selected[start:start + spec.limit]
    return page, count
