from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import uvicorn

from app.core.config import settings
from app.modules.auth.routes import router as auth_router
from app.modules.keywords.routes import router as keywords_router
from app.modules.tenders.routes import router as tenders_router
from app.modules.search.routes import router as search_router
# Registers every mapped class before relationship() strings are resolved
from app.modules.auth import models as auth_models  # noqa: F401
from app.modules.keywords import models as keyword_models  # noqa: F401
from app.modules.tenders import models as tender_models  # noqa: F401

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    description="Tender Tracker API",
    version=settings.VERSION,
    debug=settings.DEBUG
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers with API prefix
api_prefix = settings.API_PREFIX
app.include_router(auth_router, prefix=f"{api_prefix}/auth", tags=["Authentication"])
app.include_router(keywords_router, prefix=f"{api_prefix}/keywords", tags=["Keywords"])
app.include_router(tenders_router, prefix=f"{api_prefix}/tenders", tags=["Tenders"])
app.include_router(search_router, prefix=f"{api_prefix}/search", tags=["Search"])

@app.get("/")
async def root():
    return {
        "app_name": settings.APP_NAME,
        "version": settings.VERSION,
        "message": "Welcome to the API"
    }

if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
