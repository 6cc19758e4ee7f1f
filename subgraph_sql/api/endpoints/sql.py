import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, status

from subgraph_sql.core import schemas
from subgraph_sql.core.client import get_http_client
from subgraph_sql.core.connection import create_connection
from subgraph_sql.core.security import get_api_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sql", tags=["SQL"])

client_dep = Annotated[httpx.AsyncClient, Depends(get_http_client)]
api_key_dep = Annotated[str, Depends(get_api_key)]


@router.post(
    "/execute",
    response_model=schemas.QueryResult,
    status_code=status.HTTP_200_OK,
)
async def execute_sql(
    payload: schemas.SqlExecuteRequest, api_key: api_key_dep, client: client_dep
):
    """
    Resolve the subgraph, check it is SQL enabled, then run the query
    on the gateway with the caller's key.
    """
    connection = await create_connection(
        payload.to_selector(), api_key, payload.testnet, client=client
    )
    logger.info(f"Proxying SQL for {connection!r}")
    return await connection.execute(payload.query)
