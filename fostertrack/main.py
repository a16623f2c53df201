from contextlib import asynccontextmanager
from os import environ

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from tortoise import generate_config
from tortoise.contrib.fastapi import RegisterTortoise

from .config import config
from .routes import animals, groups, fosters_needed
from .utils.cache import Cache
from .utils.custom_exception import CustomMessageException


@asynccontextmanager
async def connect_orm_and_cache(app_: FastAPI):
    Cache.configure(config.cache_config())

    is_testing = environ.get("FOSTERTRACK_TESTING") == "1"
    orm_config = generate_config(
        config.db_connection_string,
        app_modules={"models": ["fostertrack.models"]},
        testing=is_testing,
    )

    async with RegisterTortoise(
            app=app_,
            config=orm_config,
            generate_schemas=True,
    ):
        yield

    await Cache.clear()


app = FastAPI(
    lifespan=connect_orm_and_cache,
    debug=config.is_debug,
    openapi_url="/openapi.json" if config.is_debug else None,
    root_path=config.root_path,
)
app.add_middleware(
    CORSMiddleware,  # type: ignore
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=(["*"] if config.is_debug else [])
)

app.include_router(animals.router)
app.include_router(groups.router)
app.include_router(fosters_needed.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_, exc: RequestValidationError) -> JSONResponse:
    result = []
    for err in exc.errors():
        loc = ".".join([str(l) for l in err["loc"][1:]])
        if loc:
            loc = f"[{loc}] "
        result.append(f"{loc}{err['msg']}")

    return JSONResponse({
        "errors": result,
    }, status_code=422)


@app.exception_handler(CustomMessageException)
async def custom_message_exception_handler(_, exc: CustomMessageException) -> JSONResponse:
    return JSONResponse({
        "errors": exc.messages,
        "retryable": getattr(exc, "retryable", False),
    }, status_code=exc.status_code)
