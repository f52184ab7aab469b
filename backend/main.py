import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import APP_VERSION, CORS_ORIGINS, LOG_LEVEL
from database import check_db_connection, init_db
from exceptions import AppException, app_exception_handler, generic_exception_handler
from analysis_api import router as analysis_router
from companies_api import router as companies_router
from jobs_api import router as jobs_router
from upload_api import router as upload_router
from users_api import router as users_router
from webhook_api import router as webhook_router

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="SkillGap API", version=APP_VERSION)

app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=CORS_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router)
app.include_router(companies_router)
app.include_router(jobs_router)
app.include_router(analysis_router)
app.include_router(upload_router)
app.include_router(webhook_router)


@app.on_event("startup")
async def startup_event():
    if check_db_connection():
        init_db()
        logger.info("Database connected successfully")
    else:
        logger.warning("Database connection failed - check DATABASE_URL")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/")
async def health():
    return {"status": "online", "version": APP_VERSION}
