import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import wealthshare.models  # ensure models are registered
from wealthshare.ledger.errors import PersistenceError, SnapshotError
from wealthshare.utils.database import engine, Base
from wealthshare.utils.dependencies import ledger

from wealthshare.routers import (
    members_router,
    accounts_router,
    loans_router,
    transactions_router,
    settings_router,
    db_maintenance_router,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="WealthShare Ledger API", version="1.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:8080",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8080",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(members_router.router)
app.include_router(accounts_router.router)
app.include_router(loans_router.router)
app.include_router(transactions_router.router)
app.include_router(settings_router.router)
app.include_router(db_maintenance_router.router)


@app.on_event("startup")
def on_startup():
    # DEV ONLY – OK for now
    Base.metadata.create_all(bind=engine)

    logger.info("Loading ledger from the database…")
    try:
        ledger.reload()
    except (PersistenceError, SnapshotError):
        # keep serving with an empty ledger; POST /db/reload retries
        logger.exception("Initial ledger load failed")


@app.on_event("shutdown")
def on_shutdown():
    ledger.flush()


@app.get("/")
def root():
    return {"message": "WealthShare Ledger is running!!"}
