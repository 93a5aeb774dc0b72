from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import CORS_ORIGINS
from .db import create_db_and_tables
from .routers import quiz_routers


@asynccontextmanager
async def lifespan(app: FastAPI):
    # run once when app starts
    await create_db_and_tables()
    yield

app = FastAPI(title="QuizFlow reference Quiz API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,  # which sites can call this API
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quiz_routers.router)
