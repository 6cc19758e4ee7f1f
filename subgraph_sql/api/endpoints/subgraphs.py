from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from subgraph_sql.core import schemas
from subgraph_sql.core.client import get_http_client
from subgraph_sql.core.connection import list_sql_enabled_subgraphs, registry_endpoint
from subgraph_sql.core.registry import find_subgraph

router = APIRouter(prefix="/subgraphs", tags=["Subgraphs"])

client_dep = Annotated[httpx.AsyncClient, Depends(get_http_client)]


@router.post(
    "/lookup",
    response_model=schemas.SubgraphRecord,
    status_code=status.HTTP_200_OK,
)
async def lookup_subgraph(payload: schemas.SubgraphLookup, client: client_dep):
    """Resolve one selector field to the canonical subgraph record."""
    selector = payload.to_selector()
    record = await find_subgraph(
        registry_endpoint(payload.testnet), selector, client=client
    )

    if record is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Subgraph not found")

    return record


@router.get("/sql-enabled", response_model=schemas.SqlEnabledSubgraphs)
async def get_sql_enabled_subgraphs(client: client_dep, testnet: bool = False):
    """Subgraphs the gateway currently lists as SQL capable."""
    records = await list_sql_enabled_subgraphs(testnet, client=client)
    return schemas.SqlEnabledSubgraphs(total=len(records), subgraphs=records)
