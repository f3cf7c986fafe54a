from contextlib import asynccontextmanager
from bson.errors import InvalidId
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from loguru import logger
from pymongo.errors import PyMongoError
from doccrud.config import settings
from doccrud.database.manager import DatabaseManager
from doccrud.middleware.context_md import RequestContextMiddleware
from doccrud.logging.logger import LogConfig
from doccrud.exceptions.handler import BusinessException, global_exception_handler
from apps.models import COLLECTIONS
from apps.articles.api.router import router as article_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    manager = DatabaseManager.get_instance()
    await manager.mongo.connect()
    # Collections must exist before they are written inside a transaction
    database = manager.mongo.get_database()
    existing = set(await database.list_collection_names())
    for name in COLLECTIONS:
        if name not in existing:
            await database.create_collection(name)
    logger.info(f"Connected to MongoDB database {settings.MONGO_DB}")
    yield
    await manager.mongo.disconnect()


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Initialize logging configuration
LogConfig.setup_logging()

# Register global exception handlers
app.add_exception_handler(BusinessException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(InvalidId, global_exception_handler)
app.add_exception_handler(PyMongoError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(RequestContextMiddleware)

# Mount routers (prefix from config)
app.include_router(
    article_router,
    prefix=settings.API_V1_ARTICLES_PREFIX,
    tags=["Articles"]
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
