# server.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# --- Logging Configuration ---
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger(__name__)

from nainzaka import admin, auth, chat, orders, products, store
from nainzaka.db import Base, async_session_maker, engine
from nainzaka.settings import settings

# --- App Initialization ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Storefront, admin panel and chat assistant API for Nainzaka Aesthetics.",
    version="1.0.0",
)

# --- CORS Middleware ---
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Database Startup Event ---
@app.on_event("startup")
async def on_startup():
    """Create tables, then seed the default categories and the admin account."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("Database tables verified/created.")

    async with async_session_maker() as session:
        await store.seed_categories(session)
        await auth.seed_admin(session)


@app.get("/health")
async def health():
    return {"status": "ok", "service": settings.PROJECT_NAME}


# =======================================
# ROUTER INCLUSION
# =======================================

app.include_router(products.router, prefix=settings.API_PREFIX)
app.include_router(orders.router, prefix=settings.API_PREFIX)
app.include_router(chat.router, prefix=settings.API_PREFIX)
app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(admin.router, prefix=settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("nainzaka.server:app", host="0.0.0.0", port=8000, reload=False)
