"""
QuickQuote - FastAPI Backend API

This API provides endpoints for renovation estimates, derived quote
totals, PDF export and saved drafts/history/material favorites.
"""

import logging
import os
import sys
from typing import Any, Optional, List, Dict, Union, Literal
from datetime import datetime

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from calculator import (
    EstimateError,
    MaterialExtra,
    ClientSnapshot,
    QuoteInputs,
    Quote,
    breakdown_shares,
    build_quote,
    clamp,
    compare_quality_tiers,
    compute_estimate,
    load_rate_table,
)
from api import config
from api.logging_config import setup_logging
from api.pdf_generator import PDFReportGenerator, PDF_FILENAME
from api.quote_store import QuoteStore, quote_store

setup_logging(config.LOG_LEVEL, config.LOG_JSON)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Initialize FastAPI app
app = FastAPI(
    title="QuickQuote API",
    description="Ballpark renovation cost estimates",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services
rate_table = load_rate_table(config.RATES_FILE or None)
pdf_generator = PDFReportGenerator(rate_table)


def get_store() -> QuoteStore:
    """Store dependency; tests override it with a temporary store."""
    return quote_store


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str


class EstimateRequest(BaseModel):
    area: Union[float, str, None] = None
    project_type: str
    quality_tier: str
    location_name: str


class EstimateResponse(BaseModel):
    labor: float
    material: float
    total: float
    currency: str


class ClampRequest(BaseModel):
    value: Union[float, str, None] = None
    minimum: float = config.MIN_ROOM_SIZE
    maximum: float = config.MAX_ROOM_SIZE


class ClampResponse(BaseModel):
    value: float


class MaterialExtraInput(BaseModel):
    name: str
    cost: float = Field(0, ge=0)
    id: Optional[str] = None
    entry_id: Optional[str] = None


class ClientInput(BaseModel):
    name: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    notes: str = ""


class QuoteRequest(BaseModel):
    role: Optional[Literal["Homeowner", "Contractor"]] = None
    project_type: Optional[str] = None
    quality: Optional[str] = None
    location: Optional[str] = None
    unit: Literal["sqft", "sqm"] = "sqft"
    size: Union[float, str] = 100
    currency_mode: str = "Auto"
    overhead_pct: float = Field(10, ge=0)
    tax_pct: float = Field(0, ge=0)
    discount_pct: float = Field(0, ge=0)
    labor_markup_pct: float = Field(15, ge=0)
    material_markup_pct: float = Field(10, ge=0)
    material_additions: List[MaterialExtraInput] = []
    client: ClientInput = ClientInput()


class QuoteResponse(BaseModel):
    inputs: Dict[str, Any]
    area_sqft: float
    estimate: EstimateResponse
    totals: Dict[str, float]
    formatted: Dict[str, str]
    currency: str
    breakdown: Dict[str, int]
    share_params: Dict[str, str]
    error: str


class FavoriteInput(BaseModel):
    name: str
    cost: Union[float, str]


class FavoriteResponse(BaseModel):
    id: str
    name: str
    cost: float


# ============================================================================
# Helpers
# ============================================================================

def _default_option(value: str, options: List[str]) -> Optional[str]:
    return value if value in options else None


def default_inputs() -> QuoteInputs:
    """Form defaults, with configured defaults applied when they are valid."""
    return QuoteInputs.defaults(
        rate_table,
        role=_default_option(config.DEFAULT_ROLE, ["Homeowner", "Contractor"]),
        project_type=_default_option(config.DEFAULT_PROJECT, rate_table.project_names),
        quality=_default_option(config.DEFAULT_QUALITY, rate_table.quality_tiers),
        location=_default_option(config.DEFAULT_LOCATION, rate_table.location_names),
    )


def to_inputs(request: QuoteRequest) -> QuoteInputs:
    """Convert a request into quote inputs, clamping the room size."""
    defaults = default_inputs()

    additions = []
    for item in request.material_additions:
        extra = MaterialExtra(name=item.name, cost=item.cost)
        if item.id:
            extra.id = item.id
        if item.entry_id:
            extra.entry_id = item.entry_id
        additions.append(extra)

    return QuoteInputs(
        role=request.role or defaults.role,
        project_type=request.project_type or defaults.project_type,
        quality=request.quality or defaults.quality,
        location=request.location or defaults.location,
        unit=request.unit,
        size=clamp(request.size, config.MIN_ROOM_SIZE, config.MAX_ROOM_SIZE),
        currency_mode=request.currency_mode,
        overhead_pct=request.overhead_pct,
        tax_pct=request.tax_pct,
        discount_pct=request.discount_pct,
        labor_markup_pct=request.labor_markup_pct,
        material_markup_pct=request.material_markup_pct,
        material_additions=additions,
        client=ClientSnapshot(**request.client.model_dump()),
    )


def to_response(quote: Quote) -> QuoteResponse:
    totals = quote.totals
    return QuoteResponse(
        inputs=quote.inputs.to_draft_record(ts=0),
        area_sqft=quote.area_sqft,
        estimate=EstimateResponse(**quote.estimate.to_dict()),
        totals=totals.to_dict(),
        formatted=quote.formatted(),
        currency=quote.currency,
        breakdown=breakdown_shares(totals.markup_labor, totals.markup_material, totals.overhead_amt),
        share_params=quote.inputs.to_query_params(),
        error=quote.error,
    )


def _quote(inputs: QuoteInputs) -> Quote:
    return build_quote(inputs, rate_table, config.LOCALE)


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/", response_model=HealthResponse)
async def root():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        version=API_VERSION
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        version=API_VERSION
    )


@app.get("/api/v1/rates")
async def get_rates():
    """Rate table and the option lists for the form."""
    return {
        "rates": rate_table.to_dict(),
        "projects": rate_table.project_names,
        "qualities": rate_table.quality_tiers,
        "locations": rate_table.location_names,
        "defaults": default_inputs().to_draft_record(ts=0),
    }


@app.post("/api/v1/estimate", response_model=EstimateResponse)
async def estimate(request: EstimateRequest):
    """
    Compute the base estimate for a room.

    Returns: Rounded labor, material and total with the currency code
    """
    try:
        result = compute_estimate(
            request.area,
            request.project_type,
            request.quality_tier,
            request.location_name,
            rate_table
        )
    except EstimateError as e:
        raise HTTPException(status_code=400, detail={"kind": e.kind, "message": e.message})

    return EstimateResponse(**result.to_dict())


@app.post("/api/v1/compare-tiers")
async def compare_tiers(request: EstimateRequest):
    """Engine totals for every quality tier at the requested location."""
    try:
        return compare_quality_tiers(request.area, request.project_type, request.location_name, rate_table)
    except EstimateError as e:
        raise HTTPException(status_code=400, detail={"kind": e.kind, "message": e.message})


@app.post("/api/v1/clamp", response_model=ClampResponse)
async def clamp_value(request: ClampRequest):
    """Sanitize a free-text number into [minimum, maximum]."""
    return ClampResponse(value=clamp(request.value, request.minimum, request.maximum))


@app.post("/api/v1/quote", response_model=QuoteResponse)
async def quote(request: QuoteRequest):
    """
    Full quote: estimate, markups, overhead, discount, tax and range.

    Estimate errors are reported in the ``error`` field with zero amounts.
    """
    return to_response(_quote(to_inputs(request)))


@app.get("/api/v1/quote/share", response_model=QuoteResponse)
async def shared_quote(request: Request):
    """Recompute a quote from share-link query parameters."""
    inputs = QuoteInputs.from_query_params(dict(request.query_params), rate_table)
    return to_response(_quote(inputs))


@app.post("/api/v1/generate-pdf")
async def generate_pdf_report(request: QuoteRequest):
    """
    Generate a PDF summary of a quote.

    Returns: PDF file as a downloadable stream
    """
    computed = _quote(to_inputs(request))
    if computed.error:
        raise HTTPException(status_code=400, detail=computed.error)

    try:
        pdf_buffer = pdf_generator.generate_report(computed)
    except Exception as e:
        logger.exception("PDF generation failed", extra={"project_type": computed.inputs.project_type})
        raise HTTPException(status_code=500, detail=str(e))

    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{PDF_FILENAME}"'
        }
    )


# ============================================================================
# History
# ============================================================================

@app.get("/api/v1/history")
async def list_history(store: QuoteStore = Depends(get_store)):
    """Saved quotes, newest first."""
    return store.list_history()


@app.post("/api/v1/history")
async def save_to_history(request: QuoteRequest, store: QuoteStore = Depends(get_store)):
    """Compute a quote and save it at the top of the history."""
    computed = _quote(to_inputs(request))
    entry = store.save_quote(computed)
    if entry is None:
        raise HTTPException(status_code=400, detail=computed.error)
    return entry


@app.get("/api/v1/history/{index}/quote", response_model=QuoteResponse)
async def load_from_history(index: int, store: QuoteStore = Depends(get_store)):
    """Restore a saved quote's inputs and recompute it."""
    history = store.list_history()
    if index < 0 or index >= len(history):
        raise HTTPException(status_code=404, detail="No saved quote at that position")
    inputs = default_inputs().apply_record(history[index], rate_table)
    return to_response(_quote(inputs))


@app.delete("/api/v1/history")
async def clear_history(store: QuoteStore = Depends(get_store)):
    store.clear_history()
    return {"cleared": True}


# ============================================================================
# Draft
# ============================================================================

@app.get("/api/v1/draft")
async def load_draft(store: QuoteStore = Depends(get_store)):
    """
    The saved draft and the quote it restores to.

    Invalid draft values are ignored and keep their defaults.
    """
    draft = store.load_draft()
    if draft is None:
        return {"draft": None, "quote": None}
    inputs = default_inputs().apply_record(draft, rate_table)
    return {"draft": draft, "quote": to_response(_quote(inputs))}


@app.put("/api/v1/draft")
async def save_draft(request: QuoteRequest, store: QuoteStore = Depends(get_store)):
    return store.save_draft(to_inputs(request))


@app.delete("/api/v1/draft")
async def clear_draft(store: QuoteStore = Depends(get_store)):
    store.clear_draft()
    return {"cleared": True, "defaults": default_inputs().to_draft_record(ts=0)}


# ============================================================================
# Material favorites
# ============================================================================

@app.get("/api/v1/favorites", response_model=List[FavoriteResponse])
async def list_favorites(store: QuoteStore = Depends(get_store)):
    return [FavoriteResponse(id=fav.id, name=fav.name, cost=fav.cost) for fav in store.list_favorites()]


@app.post("/api/v1/favorites", response_model=FavoriteResponse)
async def add_favorite(request: FavoriteInput, store: QuoteStore = Depends(get_store)):
    """Add a material favorite. Needs a name and a numeric cost."""
    favorite = store.add_favorite(request.name, request.cost)
    if favorite is None:
        raise HTTPException(status_code=400, detail="Favorite needs a name and a numeric cost")
    return FavoriteResponse(id=favorite.id, name=favorite.name, cost=favorite.cost)


@app.delete("/api/v1/favorites/{favorite_id}")
async def remove_favorite(favorite_id: str, store: QuoteStore = Depends(get_store)):
    if not store.remove_favorite(favorite_id):
        raise HTTPException(status_code=404, detail="Favorite not found")
    return {"removed": favorite_id}


# ============================================================================
# Run server
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
