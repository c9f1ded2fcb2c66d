"""Server-rendered influencer list page"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from api.routes.influencers import build_list_query
from lib.logging import get_logger
from lib.models import serialize_influencer
from lib.settings import settings
from lib.store import InfluencerStore, StorageError, get_influencer_store
from web.influencers_list import FETCH_FAILED, InfluencersList

router = APIRouter(tags=["pages"])
logger = get_logger(__name__)


@router.get("/influencers", response_class=HTMLResponse)
async def influencers_page(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    store: InfluencerStore = Depends(get_influencer_store),
):
    """
    Render the list seeded with the first page, so no client-side fetch
    is needed. The search form submits back here.
    """
    spec = build_list_query(1, settings.list_page_size, status=status, search=search)

    error = None
    try:
        rows, _ = await store.select(spec)
        seed = [serialize_influencer(row) for row in rows]
    except StorageError as e:
        logger.error(f"Influencer page query failed: {e}")
        seed = []
        error = FETCH_FAILED
    except Exception:
        logger.exception("Unexpected error rendering influencer page")
        seed = []
        error = FETCH_FAILED

    view = InfluencersList(initial_data=seed, page_size=settings.list_page_size)
    view.set_search_term(search or "")
    view.set_status_filter(status or "")
    view.error = error

    return HTMLResponse(view.render(), status_code=500 if error else 200)
