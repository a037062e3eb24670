import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from storeshift.api.routes import schedule
from storeshift.core.config import settings
from storeshift.db.database import init_database

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()
    yield


app = FastAPI(title="StoreShift API", version="0.1.0", lifespan=lifespan)

app.include_router(schedule.router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "ok"}
