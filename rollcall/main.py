"""Roll Call - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import ServerSelectionTimeoutError

from rollcall.config import settings
from rollcall.db import db_shutdown, init_db
from rollcall.seed import seed_admin, seed_demo_class
from rollcall.api import auth, users, classes, attendance, activities, reports, wizard
from rollcall.api.deps import get_current_user

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await init_db()
        await seed_admin()
        if settings.seed_demo_data:
            await seed_demo_class()
    except ServerSelectionTimeoutError as e:
        logger.error(
            "MongoDB is not running. Start it with: docker compose up -d (from project root)"
        )
        raise RuntimeError(
            "MongoDB connection failed. Start MongoDB (e.g. docker compose up -d)."
        ) from e
    yield
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description="Class attendance and weekly missionary activity records",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
authenticated = [Depends(get_current_user)]
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"], dependencies=authenticated)
app.include_router(classes.router, prefix="/api", tags=["Classes & Students"], dependencies=authenticated)
app.include_router(attendance.router, prefix="/api", tags=["Attendance"], dependencies=authenticated)
app.include_router(activities.router, prefix="/api/missionary-activities", tags=["Missionary Activities"], dependencies=authenticated)
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"], dependencies=authenticated)
app.include_router(wizard.router, prefix="/api/wizard", tags=["Wizard"], dependencies=authenticated)


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
