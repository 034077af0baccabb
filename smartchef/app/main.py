from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from .api.community import router as community_router
from .api.recipes import router as recipes_router
from .api.users import router as users_router
from .core.config import get_settings
from .core.exceptions import EmptyIngredientsError, RecipeGenerationError, RecipeStoreError

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
log = logging.getLogger(__name__)

app = FastAPI(title="smartchef", version="0.1.0", description="AI recipe generation and community sharing")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recipes_router)
app.include_router(community_router)
app.include_router(users_router)


@app.exception_handler(EmptyIngredientsError)
async def empty_ingredients_handler(request: Request, exc: EmptyIngredientsError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(RecipeGenerationError)
async def generation_error_handler(request: Request, exc: RecipeGenerationError):
    log.error(f"❌ Recipe generation failed: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": "Failed to generate recipe. Please try again later."},
    )


@app.exception_handler(RecipeStoreError)
async def store_error_handler(request: Request, exc: RecipeStoreError):
    return JSONResponse(status_code=503, content={"detail": "Recipe storage is unavailable."})


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "message": "smartchef API is running",
        "openai_configured": bool(settings.openai_api_key),
        "firebase_configured": bool(settings.firebase_database_url),
    }
