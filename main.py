import argparse
import logging
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db, get_conn
from config import load_config
from routes import students, assignments, sync, schedule, schedule_templates
from utils.sync import run_reconciliation_for_all

logger = logging.getLogger("studyflow")


def configure_logging(config: dict) -> None:
    level = config.get("logging", {}).get("level", "INFO")
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()  # Ensures config exists
    configure_logging(config)
    init_db()
    yield


app = FastAPI(
    title="StudyFlow",
    description="Daily schedules for students, kept in sync with Canvas",
    lifespan=lifespan,
)

# Include routers
app.include_router(students.router, prefix="/students", tags=["students"])
app.include_router(assignments.router, prefix="/assignments", tags=["assignments"])
app.include_router(sync.router, prefix="/sync", tags=["sync"])
app.include_router(schedule.router, prefix="/schedule", tags=["schedule"])
app.include_router(schedule_templates.router, prefix="/templates", tags=["templates"])


@app.get("/")
async def home():
    return {"app": "StudyFlow", "docs": "/docs"}


def sync_all() -> int:
    config = load_config()
    with get_conn() as conn:
        outcomes = run_reconciliation_for_all(conn, config)
    failures = 0
    for name, outcome in outcomes.items():
        if isinstance(outcome, str):
            failures += 1
            logger.error("Sync %s failed: %s", name, outcome)
        else:
            logger.info(
                "Sync %s: %d imported, %d deleted, %d restored, %d completed, %d reopened",
                name,
                outcome.imported,
                outcome.deleted,
                outcome.restored,
                outcome.completed,
                outcome.reopened,
            )
    return 1 if failures else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="StudyFlow App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    parser.add_argument("--sync", action="store_true", help="Sync every student with Canvas and exit")
    args = parser.parse_args()
    configure_logging(load_config())
    if args.init:
        init_db()
        print("DB initialized and config copied to ~/.studyflow/")
        sys.exit(0)
    if args.sync:
        init_db()
        sys.exit(sync_all())
    # Run server
    port = 8000
    reload = args.dev
    uvicorn.run("main:app", host="127.0.0.1", port=port, reload=reload, log_level="info")
