import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from taskboard.core.config import settings
from taskboard.core.database import init_models
from taskboard.core.errors import TaskboardError, taskboard_error_handler
from taskboard.core.logging_setup import setup_logging
from taskboard.routers import auth, tasks

logger = logging.getLogger(__name__)

app = FastAPI(title="Taskboard API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(TaskboardError, taskboard_error_handler)

app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(tasks.router, prefix=settings.API_PREFIX)

@app.on_event("startup")
async def startup():
    setup_logging(settings.LOG_LEVEL)
    await init_models()
    logger.info("startup event=ready api_prefix=%s", settings.API_PREFIX)

@app.get("/")
async def root():
    return {"message": "Taskboard API is running"}

def run():
    import uvicorn

    uvicorn.run("taskboard.main:app", host="0.0.0.0", port=settings.API_PORT)
