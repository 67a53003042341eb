from fastapi import FastAPI, HTTPException, Path
from fastapi.responses import HTMLResponse, Response

from deck_occurrences.api.occurrence_service import (
    CacheStatusResponse,
    OccurrenceResponse,
    occurrence_service,
)
from deck_occurrences.api.render import render_occurrence_table
from deck_occurrences.batch.refresh import RefreshError, RefreshInProgressError, default_refresher

app = FastAPI(title="Deck Occurrences API")


@app.get("/vocabulary/{vocab_id}/occurrences", response_model=OccurrenceResponse)
def vocabulary_occurrences(vocab_id: int = Path(..., ge=0)) -> OccurrenceResponse:
    return occurrence_service.lookup(vocab_id)


@app.get("/vocabulary/{vocab_id}/occurrences.html", response_class=HTMLResponse)
def vocabulary_occurrences_html(vocab_id: int = Path(..., ge=0)) -> Response:
    table = occurrence_service.lookup(vocab_id).table()
    if table is None:
        return Response(status_code=204)
    return HTMLResponse(render_occurrence_table(vocab_id, table))


@app.get("/cache", response_model=CacheStatusResponse)
def cache_status() -> CacheStatusResponse:
    return occurrence_service.cache_status()


@app.post("/cache/refresh", response_model=CacheStatusResponse)
async def refresh_cache() -> CacheStatusResponse:
    try:
        await default_refresher().refresh()
    except RefreshInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except RefreshError as exc:
        raise HTTPException(status_code=502, detail=f"refresh failed: {exc}") from exc
    return occurrence_service.cache_status()
