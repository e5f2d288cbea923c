# =============================
# ✅ Import and Load .env at startup
# =============================
import os
from dotenv import load_dotenv
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), ".env"))

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from woosync.product_routes import product_router, get_wc_client

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Missing credentials raise ConfigError here, before the app serves anything
    client = get_wc_client()
    logger.info("WooCommerce API root: %s", client.settings.base_url)
    yield
    await client.aclose()
    get_wc_client.cache_clear()


# =============================
# ✅ FastAPI App Initialization
# =============================
app = FastAPI(title="woosync", lifespan=lifespan)
app.include_router(product_router, prefix="/api")


@app.get("/")
def root():
    return {"status": "ok", "msg": "WooCommerce product sync running"}


if __name__ == "__main__":
    uvicorn.run(
        "woosync.main_app:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )
