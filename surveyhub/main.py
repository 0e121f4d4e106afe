import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from . import config
from .api import api_router
from .database import create_db_and_tables, engine
from .errors import Forbidden, InvalidQuestionId, NotFound, SurveyValidationError
from .image_storage import IMAGES_SUBDIR
from .logging_setup import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

# Bildverzeichnis beim Import anlegen, vor app.mount
IMAGES_DIR = config.PUBLIC_DIR / IMAGES_SUBDIR
IMAGES_DIR.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")
    await create_db_and_tables()
    yield
    logger.info("Application shutting down...")
    await engine.dispose()


app = FastAPI(title="SurveyHub Backend", lifespan=lifespan)

logger.info("CORS: allowed origins %s", config.ALLOWED_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Gespeicherte Umfragebilder als statische Dateien ausliefern
app.mount(config.IMAGES_ROUTE, StaticFiles(directory=IMAGES_DIR), name="images")


# --- Fehlerbehandlung für Domain-Exceptions ---
@app.exception_handler(SurveyValidationError)
async def handle_validation_error(request: Request, exc: SurveyValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "detail": [
                {"loc": list(err.loc), "msg": err.msg, "type": err.code}
                for err in exc.errors
            ]
        },
    )


@app.exception_handler(Forbidden)
async def handle_forbidden(request: Request, exc: Forbidden):
    return JSONResponse(status_code=403, content={"detail": "This action is unauthorized."})


@app.exception_handler(NotFound)
async def handle_not_found(request: Request, exc: NotFound):
    # Leerer Body: "gibt es nicht" und "nicht öffentlich" sehen gleich aus
    logger.debug("Not found on %s: %s", request.url.path, exc)
    return Response(status_code=404)


@app.exception_handler(InvalidQuestionId)
async def handle_invalid_question_id(request: Request, exc: InvalidQuestionId):
    return PlainTextResponse(str(exc), status_code=400)


app.include_router(api_router)


@app.get("/")
async def read_root():
    return {"message": "Welcome to the SurveyHub backend!"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "surveyhub.main:app",
        host=config.APP_HOST,
        port=config.APP_PORT,
        reload=config.RELOAD_APP,
    )
