import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prepwise.core import config
from prepwise.core.logging_config import setup_logging
from prepwise.db.init_db import init_db
from prepwise.api.routes import auth, interviews, feedback, questions, session_ws, system

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)
    init_db()
    logger.info("PrepWise API started")
    yield


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="PrepWise AI Interviews", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(interviews.router)
app.include_router(feedback.router)
app.include_router(questions.router)
app.include_router(session_ws.router)
app.include_router(system.router)


@app.get("/")
def root():
    return {"status": "PrepWise API running"}
