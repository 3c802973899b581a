import asyncio
import os
import time
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from config import CORS_ORIGINS, UPLOAD_DIR, configure_logging
from db import create_tables
from routes.activity import activity_routes
from routes.auth import auth_routes
from routes.documents import document_routes
from routes.messages import message_routes
from routes.performance import performance_routes
from routes.students import student_routes
from services.activity_feed import activity_feeds
from services.performance_service import performance_service
from services.ws_manager import manager

configure_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Counselling CRM Backend API",
    description="Backend API for student counselling, messaging and application tracking",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Time every request for the performance report
@app.middleware("http")
async def performance_middleware(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        await asyncio.to_thread(performance_service.record_error, str(e), path=request.url.path, method=request.method)
        raise
    duration = (time.perf_counter() - start) * 1000
    # store writes stay off the event loop
    await asyncio.to_thread(
        performance_service.record_request,
        request.method,
        request.url.path,
        duration,
        response.status_code,
        request.headers.get("x-user-id"),
    )
    return response


# Mount uploads as static files so stored documents and avatars can be fetched via URL
os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")

# Health check endpoint
@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint to verify server status
    """
    return {
        "status": "healthy",
        "message": "Server is running successfully",
        "connectedUsers": manager.connected_users_count(),
        "activeRooms": manager.active_rooms(),
    }

# Register routers
app.include_router(auth_routes.router)
app.include_router(message_routes.router)
app.include_router(student_routes.router)
app.include_router(document_routes.router)
app.include_router(activity_routes.router)
app.include_router(performance_routes.router)

# Create database tables and wire the live feed on startup
@app.on_event("startup")
def on_startup():
    logger.info("Creating database tables...")
    create_tables()
    logger.info("Database tables created successfully!")
    activity_feeds.attach(manager)
    if performance_service.is_enabled:
        performance_service.monitor_api_calls()


@app.on_event("shutdown")
def on_shutdown():
    activity_feeds.detach()
    performance_service.restore_api_calls()
    performance_service.shutdown(wait=False)

# Root endpoint
@app.get("/", tags=["Root"])
def read_root():
    return {
        "message": "Welcome to Counselling CRM Backend API",
        "docs": "/docs",
        "health": "/health"
    }

if __name__ == "__main__":
    import uvicorn
    # Run on all IPs (0.0.0.0) to ensure accessibility
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
