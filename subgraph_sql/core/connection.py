"""Connection to a SQL enabled subgraph through the SQL gateway."""

import asyncio
import logging
from typing import Any, List, Mapping, Optional, Union

import httpx

from subgraph_sql.core.config import settings
from subgraph_sql.core.discovery import sql_capability_cache
from subgraph_sql.core.errors import ConfigError, NotFoundError, UnsupportedError
from subgraph_sql.core.registry import find_subgraph, search_subgraphs_by_ipfs_hashes
from subgraph_sql.core.schemas import (
    QueryResult,
    SubgraphRecord,
    SubgraphSelector,
    selector_from_fields,
)
from subgraph_sql.core.sql import execute_subgraph_sql

logger = logging.getLogger(__name__)


def registry_endpoint(testnet: bool = False) -> str:
    if testnet:
        return settings.NETWORK_SUBGRAPH_TESTNET_API
    return settings.NETWORK_SUBGRAPH_API


def resolve_api_key(api_key: Optional[str] = None) -> str:
    api_key = api_key or settings.GATEWAY_API_KEY
    if not api_key:
        raise ConfigError(
            "API key is required, either pass it as an argument "
            "or set GATEWAY_API_KEY env variable"
        )
    return api_key


class SqlSubgraphConnection:
    """
    Bound to one subgraph deployment on the SQL gateway.

    Get one from create_connection(), which checks the deployment has
    SQL indexers before building it. The check is not repeated per query.
    """

    def __init__(
        self,
        api_key: str,
        subgraph_info: SubgraphRecord,
        gateway_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        gateway_url = gateway_url or settings.SQL_GATEWAY_URL
        self._authorization = f"Bearer {api_key}"
        self._subgraph_info = subgraph_info
        self._endpoint = f"{gateway_url}/api/deployments/id/{subgraph_info.deployment_id}"
        self._client = client

    @property
    def subgraph_info(self) -> SubgraphRecord:
        return self._subgraph_info

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def execute(
        self, query: str, cancel_event: Optional[asyncio.Event] = None
    ) -> QueryResult:
        """
        Execute a SQL query on the subgraph.

        Example:
            result = await connection.execute("SELECT 1;")
            result.data.sql.rows  # [{"?column?": 1}]
        """
        return await execute_subgraph_sql(
            self._endpoint, query, cancel_event, self._authorization, self._client
        )

    def __repr__(self):
        return (
            f"SqlSubgraphConnection(subgraph={self._subgraph_info.display_name!r}, "
            f"deployment={self._subgraph_info.deployment_id!r})"
        )


async def create_connection(
    subgraph: Union[SubgraphSelector, Mapping[str, Any]],
    api_key: Optional[str] = None,
    testnet: bool = False,
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> SqlSubgraphConnection:
    """
    Create a connection to a SQL enabled subgraph.

    Steps (each one stops the chain on failure):
        1. API key: argument, else GATEWAY_API_KEY
        2. Registry lookup on mainnet or testnet
        3. SQL indexer count from the gateway discovery cache
        4. Build the connection

    Args:
        subgraph: selector variant, or loose fields like {"ipfs": "Qm..."}
        api_key: SQL gateway API key
        testnet: search the testnet registry
        cancel_event: set it to abort the in-flight request
        client: shared httpx client, reused by the connection

    Raises:
        ConfigError: no API key, or a selector with no field set
        NotFoundError: the registry has no match
        UnsupportedError: no indexer serves SQL for the deployment
    """
    api_key = resolve_api_key(api_key)

    if isinstance(subgraph, Mapping):
        subgraph = selector_from_fields(
            id=subgraph.get("id"),
            display_name=subgraph.get("display_name") or subgraph.get("displayName"),
            version=subgraph.get("version"),
            deployment=subgraph.get("deployment"),
            ipfs=subgraph.get("ipfs"),
        )

    endpoint = registry_endpoint(testnet)
    subgraph_info = await find_subgraph(endpoint, subgraph, cancel_event, client)

    if subgraph_info is None:
        logger.warning(f"Subgraph not found for {subgraph!r}")
        raise NotFoundError("Subgraph not found")

    sql_indexer_count = await sql_capability_cache.get_sql_indexer_count(
        subgraph_info.ipfs_hash, cancel_event, client
    )

    if sql_indexer_count <= 0:
        raise UnsupportedError("Subgraph does not have any SQL enabled deployments")

    logger.info(
        f"Connected to {subgraph_info.display_name} ({subgraph_info.ipfs_hash}), "
        f"{sql_indexer_count} SQL indexer(s)"
    )
    return SqlSubgraphConnection(
        api_key,
        subgraph_info.with_sql_indexers(sql_indexer_count),
        sql_capability_cache.gateway_url,
        client,
    )


async def list_sql_enabled_subgraphs(
    testnet: bool = False,
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[SubgraphRecord]:
    """Every subgraph the gateway can serve SQL for, with sql_indexers filled in."""
    deployments = await sql_capability_cache.get_sql_enabled_deployments(
        cancel_event, client
    )
    ipfs_hashes = [ipfs_hash for ipfs_hash, count in deployments.items() if count > 0]

    records = await search_subgraphs_by_ipfs_hashes(
        registry_endpoint(testnet), ipfs_hashes, cancel_event, client
    )
    return [
        record.with_sql_indexers(deployments.get(record.ipfs_hash, 0))
        for record in records
    ]
