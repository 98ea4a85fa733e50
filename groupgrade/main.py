# groupgrade/main.py
from fastapi import FastAPI
from groupgrade.config import settings
from groupgrade.database import engine, Base
from groupgrade.core.exceptions import ScoringError, scoring_error_handler
from groupgrade.routers import contribution, pressure
import groupgrade.models  # registers every table on Base.metadata
import logging
from sqlalchemy import exc as sa_exc

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="GroupGrade - Contribution & Pressure Scoring", version="1.0")

app.add_exception_handler(ScoringError, scoring_error_handler)

# Include Routers
app.include_router(contribution.router)
app.include_router(pressure.router)

# Create DB tables on startup; deployed databases are migrated with Alembic
@app.on_event("startup")
async def startup_event():
    # ignore duplicate-object errors from previous partial runs
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logging.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

@app.get("/")
def read_root():
    return {"message": "Welcome to GroupGrade scoring backend"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("groupgrade.main:app", host="0.0.0.0", port=8000, reload=True)
