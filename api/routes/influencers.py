"""Influencer collection endpoints - paginated search and creation"""
import re
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError

from lib.logging import get_logger
from lib.models import InfluencerCreate, serialize_influencer
from lib.prometheus_metrics import (
    influencer_creations_total,
    influencer_list_requests_total,
    influencer_list_rows,
)
from lib.query import QuerySpec
from lib.responses import error_response, parse_json_body, success_response
from lib.store import InfluencerStore, StorageError, get_influencer_store

router = APIRouter(prefix="/api/influencers", tags=["influencers"])
logger = get_logger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
SEARCH_COLUMNS = ("name", "email")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_positive_int(raw: Optional[str], default: int) -> int:
    """
    Leading-integer parse ("12abc" -> 12). Anything unparseable or < 1
    falls back to the default instead of being rejected.
    """
    if not raw:
        return default
    match = _LEADING_INT.match(raw)
    if not match:
        return default
    value = int(match.group(1))
    return value if value >= 1 else default


def build_list_query(
    page: int,
    limit: int,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> QuerySpec:
    spec = QuerySpec("influencers").with_count()
    if status:
        spec.where_eq("status", status)
    if search:
        spec.where_any_ilike(SEARCH_COLUMNS, search)
    return spec.page(page, limit).order("created_at", descending=True)


@router.get("")
async def list_influencers(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    store: InfluencerStore = Depends(get_influencer_store),
):
    """Filtered page of influencers, newest first, with the total match count"""
    spec = build_list_query(
        parse_positive_int(page, DEFAULT_PAGE),
        parse_positive_int(limit, DEFAULT_LIMIT),
        status=status,
        search=search,
    )

    try:
        rows, count = await store.select(spec)
    except StorageError as e:
        logger.error(f"Influencer query failed: {e}")
        influencer_list_requests_total.labels(result="error").inc()
        return error_response("Failed to fetch influencers", 500, data=[])
    except Exception:
        logger.exception("Unexpected error listing influencers")
        influencer_list_requests_total.labels(result="error").inc()
        return error_response("Internal server error", 500, data=[])

    influencer_list_requests_total.labels(result="success").inc()
    influencer_list_rows.observe(len(rows))

    return success_response(
        "Influencers fetched successfully",
        data=[serialize_influencer(row) for row in rows],
        count=count or 0,
    )


@router.post("")
async def create_influencer(
    request: Request,
    store: InfluencerStore = Depends(get_influencer_store),
):
    """
    Create an influencer.

    name, email and affiliate_code are required; commission_rate defaults
    to 30.0 and is_india to false. Unique violations on email or
    affiliate_code come back as a 400 with a specific message.
    """
    try:
        body = parse_json_body(await request.body())
    except ValueError:
        logger.exception("Could not decode influencer payload")
        return error_response("Internal server error", 500)

    if not isinstance(body, dict):
        body = {}

    try:
        payload = InfluencerCreate.model_validate(body)
    except ValidationError as e:
        logger.info(f"Rejected influencer payload: {e.error_count()} invalid field(s)")
        influencer_creations_total.labels(result="invalid").inc()
        return error_response("Invalid influencer data", 400)

    if not payload.has_required_fields:
        influencer_creations_total.labels(result="invalid").inc()
        return error_response("Name, email, and affiliate code are required", 400)

    try:
        row = await store.insert(payload.to_insert_values())
    except StorageError as e:
        logger.error(f"Influencer insert failed: {e}")
        if e.is_duplicate:
            influencer_creations_total.labels(result="duplicate").inc()
            return error_response("Email or affiliate code already exists", 400)
        influencer_creations_total.labels(result="error").inc()
        return error_response("Failed to create influencer", 400)
    except Exception:
        logger.exception("Unexpected error creating influencer")
        influencer_creations_total.labels(result="error").inc()
        return error_response("Internal server error", 500)

    influencer_creations_total.labels(result="created").inc()
    logger.info(f"Created influencer affiliate_code={payload.affiliate_code}")

    return success_response(
        "Influencer created successfully",
        data=serialize_influencer(row),
        status_code=201,
    )
