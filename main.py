"""
RentCare API gateway (FastAPI)
Mounts the payment, users, properties and auth route groups.
"""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

import database
from config import settings
from logger import logger
from routers import auth, payment, properties, users

log = logging.getLogger(__name__)

app = FastAPI(
    title="RentCare API",
    description="Backend for the owner and tenant dashboards",
    version="1.0.0",
)

log.info(f"Client URL for CORS: {settings.client_url}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.client_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["*"],
)

app.include_router(payment.router)
app.include_router(users.router)
app.include_router(properties.router)
app.include_router(auth.router)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.error("--- UNHANDLED ERROR ---")
    logger.error(f"Error Message: {exc}")
    logger.error(f"Request URL: {request.url.path}")
    logger.error(f"Request Method: {request.method}")
    logger.error("Error Stack:", exc_info=exc)
    status = getattr(exc, "status", None) or 500
    return PlainTextResponse(str(exc) or "Something broke!", status_code=status)


# ---------- Health ----------

@app.get("/")
def read_root():
    return {"message": "RentCare FastAPI Backend running"}


@app.get("/api/ping")
def ping():
    return {"message": "Backend pong!", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    db = database.db
    if db is None:
        return response
    response["database"] = "✅ Available"
    response["database_name"] = getattr(db, "name", None) or "✅ Connected"
    response["connection_status"] = "Connected"
    try:
        response["collections"] = db.list_collection_names()[:20]
        response["database"] = "✅ Connected & Working"
    except Exception as e:
        log.warning(f"Store health check failed: {e}")
        response["database"] = f"⚠️ Connected but Error: {str(e)[:80]}"
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
