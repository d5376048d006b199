import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config.logging_config import setup_logging
from ..config.settings import get_settings
from ..engine.factory import build_request_context
from ..engine.models import Order, OrderLine, TaxCategory
from ..errors import OrderCalculatorError
from . import state

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: configure logging from settings."""
    setup_logging(get_settings().log_level)
    yield


app = FastAPI(
    title="Order Calculator API",
    description="Prices orders: taxes, promotions and shipping",
    version="1.0.0",
    lifespan=lifespan,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class LineRequest(BaseModel):
    variant_id: str
    quantity: int = Field(gt=0)
    unit_price: int = Field(ge=0)  # minor units
    tax_category: str = "standard"


class PriceOrderRequest(BaseModel):
    code: str
    lines: List[LineRequest] = []
    shipping_method_id: Optional[str] = None
    shipping_country: Optional[str] = None
    request_date: Optional[str] = None  # ISO date, selects active promotions
    promotion_ids: Optional[List[str]] = None  # restrict to these promotions


def _build_order(req: PriceOrderRequest) -> Order:
    return Order(
        code=req.code,
        lines=[
            OrderLine.create(
                id=str(i + 1),
                product_variant_id=line.variant_id,
                unit_price=line.unit_price,
                tax_category=TaxCategory(id=line.tax_category, name=line.tax_category),
                quantity=line.quantity,
            )
            for i, line in enumerate(req.lines)
        ],
        shipping_method_id=req.shipping_method_id,
        shipping_country=req.shipping_country,
    )


@app.get("/")
async def root():
    return {"status": "online", "message": "Order Calculator API Active"}


@app.post("/orders/price")
async def price_order(req: PriceOrderRequest):
    try:
        calculator = state.get_calculator()
        promotions = state.get_active_promotions(req.request_date)
        if req.promotion_ids is not None:
            wanted = set(req.promotion_ids)
            promotions = [p for p in promotions if p.id in wanted]

        ctx = build_request_context(get_settings(), calculator.zone_service, req.request_date)
        order = await calculator.apply_price_adjustments(ctx, _build_order(req), promotions)
        return order.to_dict()
    except OrderCalculatorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Pricing failed for order %s", req.code)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/promotions")
async def list_promotions(as_of: Optional[str] = None, include_inactive: bool = False):
    try:
        if include_inactive:
            promotions = state.get_all_promotions()
        else:
            promotions = state.get_active_promotions(as_of)
        return [p.to_dict() for p in promotions]
    except OrderCalculatorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/system/reload")
async def reload_data():
    state.reload()
    return {"reloaded": True}


@app.get("/system/status")
async def get_status():
    settings = get_settings()
    has_compiled = settings.compiled_promotions.exists()
    return {
        "engine_active": True,
        "channel": settings.channel_code,
        "default_tax_zone": settings.default_tax_zone_id,
        "prices_include_tax": settings.prices_include_tax,
        "tax_zone_strategy": settings.tax_zone_strategy,
        "promotions_compiled_at": settings.compiled_promotions.stat().st_mtime if has_compiled else None,
    }
