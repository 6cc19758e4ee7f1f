import httpx
from fastapi import Request

from subgraph_sql.core.config import settings


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)


# The app keeps one client open for its lifetime (see main.lifespan)
async def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client
