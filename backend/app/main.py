import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.trustedhost import TrustedHostMiddleware

from app.core.config import settings
from app.core.errors import DependencyUnavailable, PluxoError, ValidationFailed
from app.core.security import now_utc
from app.api.router import router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Pluxo API",
    version="0.2.0",
)


def _split_csv(raw: str) -> list[str]:
    return [h.strip() for h in raw.split(",") if h.strip()]


allowed_hosts = _split_csv(settings.ALLOWED_HOSTS) or ["*"]
app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_split_csv(settings.ALLOWED_ORIGINS),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    response: Response = await call_next(request)
    if settings.SECURITY_HEADERS_ENABLED:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.ENV != "dev":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


@app.exception_handler(PluxoError)
async def pluxo_error_handler(request: Request, exc: PluxoError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.label, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers or None)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in e.get("loc", ()) if p != "body") for e in exc.errors()]
    fields = [f for f in fields if f]
    err = ValidationFailed("Invalid fields: " + ", ".join(fields)) if fields else ValidationFailed()
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("unhandled store error on %s %s", request.method, request.url.path, exc_info=exc)
    err = DependencyUnavailable()
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


app.include_router(router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok", "timestamp": now_utc().isoformat()}
