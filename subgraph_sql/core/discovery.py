import asyncio
import logging
from typing import Dict, Optional

import httpx

from subgraph_sql.core.cancellation import run_cancellable
from subgraph_sql.core.config import settings
from subgraph_sql.core.errors import DiscoveryError
from subgraph_sql.core.graphql import http_client

logger = logging.getLogger(__name__)


async def get_sql_enabled_deployments(
    gateway_url: str,
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, int]:
    """
    Fetch which deployments the gateway can serve SQL for.

    Args:
        gateway_url: SQL gateway base url (ie: https://sql.gateway.thegraph.semiotic.ai)
        cancel_event: set it to abort the request
        client: shared httpx client

    Returns:
        {deployment ipfs hash: number of indexers providing sql service}

    Raises:
        DiscoveryError: gateway unreachable, non-2xx status, or the body is not
            a hash -> count object
    """
    url = f"{gateway_url}/discovery"

    async with http_client(client) as http:
        try:
            response = await run_cancellable(
                http.get(url, params={"service_type": "Sql"}), cancel_event
            )
            response.raise_for_status()
            json_response = response.json()
        except (httpx.HTTPError, ValueError) as error:
            logger.error(f"SQL discovery at {url} failed: {error}")
            raise DiscoveryError(
                "Failed to fetch sql enabled subgraphs from gateway."
            ) from error

    if not isinstance(json_response, dict) or not all(
        isinstance(count, int) for count in json_response.values()
    ):
        raise DiscoveryError("Gateway discovery did not return a hash -> count object")

    return {str(ipfs_hash): count for ipfs_hash, count in json_response.items()}


class SqlCapabilityCache:
    """
    Process-wide map of ipfs hash -> SQL indexer count.

    Filled on first use and kept for the life of the process. A failed
    fetch leaves it empty so the next lookup tries again. Two callers
    racing on first use may both fetch, the last one to finish wins.
    """

    def __init__(self, gateway_url: str):
        self.gateway_url = gateway_url
        self._deployments: Optional[Dict[str, int]] = None

    @property
    def is_populated(self) -> bool:
        return self._deployments is not None

    async def get_sql_enabled_deployments(
        self,
        cancel_event: Optional[asyncio.Event] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> Dict[str, int]:
        if self._deployments is None:
            deployments = await get_sql_enabled_deployments(
                self.gateway_url, cancel_event, client
            )
            logger.info(f"Cached {len(deployments)} SQL enabled deployments")
            self._deployments = deployments
        return self._deployments

    async def get_sql_indexer_count(
        self,
        ipfs_hash: str,
        cancel_event: Optional[asyncio.Event] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> int:
        """Indexers serving SQL for this deployment, 0 when the gateway doesn't list it."""
        deployments = await self.get_sql_enabled_deployments(cancel_event, client)
        return deployments.get(ipfs_hash, 0)

    def clear(self):
        # Tests only, nothing in the package invalidates the cache
        self._deployments = None


sql_capability_cache = SqlCapabilityCache(settings.SQL_GATEWAY_URL)
