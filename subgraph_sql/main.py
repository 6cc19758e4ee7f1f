import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from subgraph_sql.api.router import api_router
from subgraph_sql.core import errors
from subgraph_sql.core.client import create_http_client
from subgraph_sql.core.config import settings

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

HTTP_422_UNPROCESSABLE = 422
# Client closed request, nginx style
HTTP_499_CLIENT_CLOSED_REQUEST = 499

ERROR_STATUS = [
    (errors.ConfigError, status.HTTP_400_BAD_REQUEST),
    (errors.NotFoundError, status.HTTP_404_NOT_FOUND),
    (errors.UnsupportedError, HTTP_422_UNPROCESSABLE),
    (errors.CancellationError, HTTP_499_CLIENT_CLOSED_REQUEST),
]


# Open one shared http client and close it once everything is done
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.http_client = create_http_client()
    yield
    await app.state.http_client.aclose()


app = FastAPI(title="Subgraph SQL Proxy", lifespan=lifespan)

# Include the master router containing all our endpoints
app.include_router(api_router)


@app.exception_handler(errors.SubgraphSqlError)
async def subgraph_sql_error_handler(request: Request, error: errors.SubgraphSqlError):
    # Anything not listed is an upstream (registry / gateway) failure
    status_code = status.HTTP_502_BAD_GATEWAY
    for error_type, code in ERROR_STATUS:
        if isinstance(error, error_type):
            status_code = code
            break

    if status_code == status.HTTP_502_BAD_GATEWAY:
        logger.error(f"Upstream error on {request.url.path}: {error}")

    return JSONResponse(status_code=status_code, content={"detail": str(error)})


@app.get("/")
async def root():
    return {"message": "Welcome to the Subgraph SQL Proxy"}
