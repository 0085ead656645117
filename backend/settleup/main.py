"""FastAPI app entrypoint."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from settleup.config import ALLOWED_ORIGINS, LOG_LEVEL
from settleup.database import engine, Base
from settleup.logging_config import setup_logging
from settleup.routers import projects, attendees, groups, expenses, settlements, suggestions

setup_logging(LOG_LEVEL)
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="SettleUp API",
    description="Share picnic and trip expenses. Work out balances and the fewest payments to settle up.",
    version="1.0.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(projects.router, prefix="/api")
app.include_router(attendees.router, prefix="/api")
app.include_router(groups.router, prefix="/api")
app.include_router(expenses.router, prefix="/api")
app.include_router(settlements.router, prefix="/api")
app.include_router(suggestions.router, prefix="/api")


@app.get("/")
def root():
    return {"message": "SettleUp API", "docs": "/docs"}


@app.get("/api/health")
def health():
    return {"status": "ok"}
