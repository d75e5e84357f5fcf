import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agenda_clinica.core.config import settings
from agenda_clinica.core.errors import SchedulingError
from agenda_clinica.database import create_db_and_tables
from agenda_clinica.routers import appointments, plans, reminders, users
from agenda_clinica.routers import settings as settings_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("API agenda_clinica pronta")
    yield


app = FastAPI(title="agenda_clinica", lifespan=lifespan)
app.include_router(users.router)
app.include_router(appointments.router)
app.include_router(plans.router)
app.include_router(reminders.router)
app.include_router(settings_router.router)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    if exc.status_code >= 500:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/")
def root():
    return {"message": "API agenda_clinica funcionando 🚀"}
