from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
import logging
from vintage_beauty.config import get_settings
from vintage_beauty.routers import products, categories, hero_carousel, orders
from vintage_beauty.utils.storage import MEDIA_ROOT

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Vintage Beauty API")


def create_tables() -> None:
    # Ensure all DB tables exist after all models are imported
    from vintage_beauty.models.user import Base, engine  # Base/engine single source
    import vintage_beauty.models.category  # register Category model
    import vintage_beauty.models.product  # register Product model
    import vintage_beauty.models.hero_carousel  # register HeroCarouselItem model
    import vintage_beauty.models.order  # register Order and OrderItem models
    Base.metadata.create_all(bind=engine)


@app.on_event("startup")
def on_startup():
    try:
        create_tables()
    except Exception as e:
        logger.error("Startup table creation failed: %s", e)
        raise


# Ensure media directory exists before mounting
MEDIA_ROOT.mkdir(parents=True, exist_ok=True)

# Serve uploaded media files
app.mount("/media", StaticFiles(directory=str(MEDIA_ROOT)), name="media")

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
app.include_router(hero_carousel.router, prefix="/api/hero-carousel", tags=["hero-carousel"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])


@app.get("/api/health")
def health():
    return {"status": "ok"}


# --- Entry point for local runs ---
if __name__ == "__main__":
    import uvicorn, os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("vintage_beauty.main:app", host="0.0.0.0", port=port, reload=False)
