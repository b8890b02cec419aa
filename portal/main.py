import logging

from fastapi import FastAPI

from portal.core.errors import register_exception_handlers
from portal.core.logging_middleware import LoggingMiddleware
from portal.db.init_db import init_db
from portal.routers.assessments import router as assessments_router
from portal.routers.auth import router as auth_router
from portal.routers.categories import router as categories_router
from portal.routers.submissions import router as submissions_router

logging.basicConfig(level=logging.INFO)


app = FastAPI(title="Assessment Portal")

# Middleware
app.add_middleware(LoggingMiddleware)

# Errors keep their kind end-to-end as {"detail", "code"}
register_exception_handlers(app)


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(assessments_router, prefix="/assessments", tags=["assessments"])
app.include_router(categories_router, prefix="/categories", tags=["categories"])
app.include_router(submissions_router, prefix="/submissions", tags=["submissions"])
