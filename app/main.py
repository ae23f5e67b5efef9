import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from app.core.config import CORS_ORIGINS
from app.core.exceptions import DomainError
from app.core.logging_config import configure_logging
from app.database import create_db_and_tables
from app.api import allocations, debts, transactions
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    create_db_and_tables()
    yield

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(DomainError)
def domain_error_handler(request: Request, exc: DomainError):
    logger.warning("%s %s rejected: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )

app.include_router(debts.router)
app.include_router(transactions.router)
app.include_router(allocations.debt_router)
app.include_router(allocations.transaction_router)

@app.get("/")
def root():
    return {"message": "Servidor de deudas y pagos por proyecto"}
