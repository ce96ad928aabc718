import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth.routes import auth
from chat.routes import chat
from common.database import MongoDBConnection
from common.exceptions import AppError
from common.helpers import utcnow
from contact.routes import contact
from event.routes import event

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("College Event Management System API starting")
    yield
    MongoDBConnection.close()


app = FastAPI(title="College Event Management System API", version=VERSION, lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

app.include_router(auth, prefix="/auth", tags=["auth"])
app.include_router(event, prefix="/events", tags=["events"])
app.include_router(contact, prefix="/contact", tags=["contact"])
app.include_router(chat, prefix="/chat", tags=["chat"])


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message, exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request")
    first = errors[0]
    field = ".".join(
        str(part) for part in first["loc"] if part not in ("body", "query", "path")
    )
    message = f"{field}: {first['msg']}" if field else first["msg"]
    return _error(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.get("/")
async def root():
    return {
        "success": True,
        "message": "College Event Management System API",
        "version": VERSION,
        "endpoints": {
            "auth": "/auth",
            "events": "/events",
            "chat": "/chat",
            "contact": "/contact",
            "health": "/health",
        },
    }


@app.get("/health")
async def health():
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": utcnow().isoformat(),
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "localhost"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
