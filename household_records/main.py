import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from household_records.api.health import router as health_router
from household_records.api.root import router as root_router
from household_records.api.record_types import router as record_types_router
from household_records.api.records import router as records_router
from household_records.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Household Records")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(root_router)
app.include_router(health_router)
app.include_router(record_types_router)
app.include_router(records_router)
