"""
REGISTRY MODULE - Find subgraphs in the graph network subgraph

Purpose:
    1. Build a SearchGeneric request from one of two templates
    2. Send it to the network subgraph (mainnet or testnet registry)
    3. Normalize either response shape into SubgraphRecord

Data Flow:
    selector → where filter → template → call_graphql() → normalizer → SubgraphRecord
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from subgraph_sql.core.errors import NormalizationError
from subgraph_sql.core.graphql import call_graphql
from subgraph_sql.core.schemas import (
    GraphQLRequest,
    SubgraphById,
    SubgraphByDeployment,
    SubgraphByDisplayName,
    SubgraphByIpfsHash,
    SubgraphByVersion,
    SubgraphRecord,
    SubgraphSelector,
)

logger = logging.getLogger(__name__)


# ============================================================================
# TEMPLATES
# ============================================================================

# Search from the subgraphs entity
SEARCH_TEMPLATE_SUBGRAPHS = GraphQLRequest(
    query="""query SearchGeneric($where:Subgraph_filter!) {
        subgraphs(where:$where) {
            id
            metadata {
                displayName
                description
                image
            }
            currentVersion {
                id
                version
                subgraphDeployment {
                    id
                    ipfsHash
                    indexerAllocations(where: {activeForIndexer_not: null}) {
                        activeForIndexer {
                            id
                        }
                    }
                    manifest {
                        network
                        schema {
                            id
                        }
                    }
                }
            }
        }
    }""",
    variables={"where": {}},
    operation_name="SearchGeneric",
    extensions={},
)

# The registry can't filter subgraphs on subgraphDeployment fields,
# so deployment id / ipfs hash lookups go through subgraphDeployments
SEARCH_TEMPLATE_DEPLOYMENTS = GraphQLRequest(
    query="""query SearchGeneric($where:SubgraphDeployment_filter!) {
        deployments: subgraphDeployments(where: $where) {
            id
            ipfsHash
            indexerAllocations(where: {activeForIndexer_not: null}) {
                activeForIndexer {
                    id
                }
            }
            manifest {
                network
                schema {
                    id
                }
            }
            versions {
                id
                version
                subgraph {
                    id
                    metadata {
                        displayName
                        image
                        description
                    }
                }
            }
        }
    }""",
    variables={"where": {}},
    operation_name="SearchGeneric",
    extensions={},
)


# ============================================================================
# NORMALIZERS
# ============================================================================


def subgraph_to_record(subgraph: Dict[str, Any]) -> SubgraphRecord:
    """Map one element of `data.subgraphs` to a SubgraphRecord."""
    try:
        metadata = subgraph["metadata"]
        version = subgraph["currentVersion"]
        deployment = version["subgraphDeployment"]
        manifest = deployment["manifest"]

        return SubgraphRecord(
            id=subgraph["id"],
            display_name=metadata["displayName"],
            description=metadata["description"],
            image=metadata["image"],
            current_version=version["id"],
            deployment_id=deployment["id"],
            network=manifest["network"],
            deployment_schema_id=manifest["schema"]["id"],
            ipfs_hash=deployment["ipfsHash"],
            active_indexer_allocations=len(deployment["indexerAllocations"]),
        )
    except (KeyError, TypeError, ValueError) as error:
        raise NormalizationError(
            f"subgraph element cannot be normalized: {error}"
        ) from error


def deployment_to_record(deployment: Dict[str, Any]) -> SubgraphRecord:
    """
    Map one element of `data.deployments` to a SubgraphRecord.

    versions[0] is taken as the owning subgraph / current version.
    """
    try:
        version = deployment["versions"][0]
        subgraph = version["subgraph"]
        metadata = subgraph["metadata"]
        manifest = deployment["manifest"]

        return SubgraphRecord(
            id=subgraph["id"],
            display_name=metadata["displayName"],
            description=metadata["description"],
            image=metadata["image"],
            current_version=version["id"],
            deployment_id=deployment["id"],
            network=manifest["network"],
            deployment_schema_id=manifest["schema"]["id"],
            ipfs_hash=deployment["ipfsHash"],
            active_indexer_allocations=len(deployment["indexerAllocations"]),
        )
    except (KeyError, IndexError, TypeError, ValueError) as error:
        raise NormalizationError(
            f"deployment element cannot be normalized: {error}"
        ) from error


# ============================================================================
# SEARCH
# ============================================================================


async def _search(
    endpoint: str,
    template: GraphQLRequest,
    collection: str,
    normalize: Callable[[Dict[str, Any]], SubgraphRecord],
    where: Dict[str, Any],
    cancel_event: Optional[asyncio.Event],
    client: Optional[httpx.AsyncClient],
) -> List[SubgraphRecord]:
    body = template.with_variables(where=where)
    json_response = await call_graphql(endpoint, body, cancel_event, client=client)

    try:
        items = json_response["data"][collection]
    except (KeyError, TypeError) as error:
        raise NormalizationError(f"response has no data.{collection}") from error

    records = [normalize(item) for item in items]
    logger.info(f"Registry search {where} matched {len(records)} {collection}")
    return records


async def find_from_subgraphs(
    endpoint: str,
    where: Dict[str, Any],
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[SubgraphRecord]:
    return await _search(
        endpoint,
        SEARCH_TEMPLATE_SUBGRAPHS,
        "subgraphs",
        subgraph_to_record,
        where,
        cancel_event,
        client,
    )


async def find_from_deployments(
    endpoint: str,
    where: Dict[str, Any],
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[SubgraphRecord]:
    return await _search(
        endpoint,
        SEARCH_TEMPLATE_DEPLOYMENTS,
        "deployments",
        deployment_to_record,
        where,
        cancel_event,
        client,
    )


def _first(records: List[SubgraphRecord]) -> Optional[SubgraphRecord]:
    return records[0] if records else None


async def find_subgraph_by_id(
    endpoint: str,
    subgraph_id: str,
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[SubgraphRecord]:
    where = {"id": subgraph_id}
    return _first(await find_from_subgraphs(endpoint, where, cancel_event, client))


async def find_subgraph_by_display_name(
    endpoint: str,
    display_name: str,
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[SubgraphRecord]:
    # Display names are not unique, whichever the registry lists first wins
    where = {"metadata_": {"displayName": display_name}}
    return _first(await find_from_subgraphs(endpoint, where, cancel_event, client))


async def find_subgraph_by_current_version(
    endpoint: str,
    version_id: str,
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[SubgraphRecord]:
    where = {"currentVersion_": {"id": version_id}}
    return _first(await find_from_subgraphs(endpoint, where, cancel_event, client))


async def find_subgraph_by_deployment_id(
    endpoint: str,
    deployment_id: str,
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[SubgraphRecord]:
    where = {"id": deployment_id}
    return _first(await find_from_deployments(endpoint, where, cancel_event, client))


async def find_subgraph_by_ipfs_hash(
    endpoint: str,
    ipfs_hash: str,
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[SubgraphRecord]:
    where = {"ipfsHash": ipfs_hash}
    return _first(await find_from_deployments(endpoint, where, cancel_event, client))


async def find_subgraph(
    endpoint: str,
    subgraph: SubgraphSelector,
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[SubgraphRecord]:
    """
    Find a subgraph by whichever field the selector carries.

    Args:
        endpoint: network subgraph url
            (ie: https://api.thegraph.com/subgraphs/name/graphprotocol/graph-network-arbitrum)
        subgraph: selector variant (ie: SubgraphByDisplayName(display_name="Graph Network Arbitrum"))
        cancel_event: set it to abort the request
        client: shared httpx client

    Returns:
        The first matching SubgraphRecord, or None
    """
    if isinstance(subgraph, SubgraphById):
        return await find_subgraph_by_id(endpoint, subgraph.id, cancel_event, client)
    if isinstance(subgraph, SubgraphByDisplayName):
        return await find_subgraph_by_display_name(
            endpoint, subgraph.display_name, cancel_event, client
        )
    if isinstance(subgraph, SubgraphByVersion):
        return await find_subgraph_by_current_version(
            endpoint, subgraph.version, cancel_event, client
        )
    if isinstance(subgraph, SubgraphByDeployment):
        return await find_subgraph_by_deployment_id(
            endpoint, subgraph.deployment, cancel_event, client
        )
    if isinstance(subgraph, SubgraphByIpfsHash):
        return await find_subgraph_by_ipfs_hash(
            endpoint, subgraph.ipfs, cancel_event, client
        )
    raise TypeError(f"Unknown subgraph selector: {subgraph!r}")


async def search_subgraphs_by_ipfs_hashes(
    endpoint: str,
    ipfs_hashes: List[str],
    cancel_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[SubgraphRecord]:
    """Every deployment whose ipfs hash is in the list (no first-match cut)."""
    if not ipfs_hashes:
        return []
    where = {"ipfsHash_in": list(ipfs_hashes)}
    return await find_from_deployments(endpoint, where, cancel_event, client)
