import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .errors import ApiError
from .routes.chat import router as chat_router
from .routes.evaluation import router as evaluation_router
from .routes.export import router as export_router
from .routes.judge import router as judge_router
from .routes.speech import router as speech_router
from .routes.suggestions import router as suggestions_router
from .routes.topics import router as topics_router
from .routes.transcript import router as transcript_router
from .services.openai_client import get_openai_model, is_llm_configured


# Load environment variables from .env file
load_dotenv()

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("ideajudge")


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    print("Starting AI Decision Support API")
    print(f"   OpenAI Key:  {' Configured (' + get_openai_model() + ')' if is_llm_configured() else ' Not set (using fallbacks)'}")
    print(f"   Data dir:    {get_settings().data_dir}")
    print("   Ready to judge ideas!")

    yield

    print("Shutting down AI Decision Support API")


app = FastAPI(
    title="AI Decision Support API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(topics_router)
app.include_router(chat_router)
app.include_router(evaluation_router)
app.include_router(judge_router)
app.include_router(suggestions_router)
app.include_router(speech_router)
app.include_router(transcript_router)
app.include_router(export_router)


@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "AI Decision Support",
        "version": __version__,
        "description": "Topic, idea and axis management with AI-assisted judgment",
        "docs": "/docs",
        "endpoints": {
            "topics": "GET/POST /topics, GET/PUT/DELETE /topics/{id}",
            "judge": "POST /judge - Rank ideas on the selected axes",
            "chat": "POST /chat - Axis evaluation dialogue",
            "auto_evaluate": "POST /auto-evaluate - Draft evaluations per axis",
            "suggest": "POST /suggest-axes, POST /suggest-ideas",
            "speech": "POST /speech-to-text",
            "transcript": "GET/POST/DELETE /transcript",
            "export": "POST /export-pdf",
            "health": "GET /health - Service health check"
        }
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="Check if the API server is running",
    tags=["General"]
)
async def health():
    """Global health check endpoint."""
    return {
        "status": "healthy",
        "service": "ideajudge",
        "version": __version__,
        "llm_configured": is_llm_configured(),
    }


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    """Render known errors into the response envelope."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request body"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    content = {"success": False, "error": "Internal server error"}
    if get_settings().debug:
        content["detail"] = str(exc)
    return JSONResponse(status_code=500, content=content)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ideajudge.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.debug,
    )
