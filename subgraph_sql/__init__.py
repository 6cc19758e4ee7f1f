from subgraph_sql.core.connection import (
    SqlSubgraphConnection,
    create_connection,
    list_sql_enabled_subgraphs,
)
from subgraph_sql.core.errors import (
    CancellationError,
    ConfigError,
    DiscoveryError,
    GraphQLError,
    NormalizationError,
    NotFoundError,
    SelectorError,
    SubgraphSqlError,
    TransportError,
    UnsupportedError,
)
from subgraph_sql.core.registry import find_subgraph, search_subgraphs_by_ipfs_hashes
from subgraph_sql.core.schemas import (
    QueryResult,
    SubgraphByDeployment,
    SubgraphByDisplayName,
    SubgraphById,
    SubgraphByIpfsHash,
    SubgraphByVersion,
    SubgraphRecord,
    SubgraphSelector,
    selector_from_fields,
)

__all__ = [
    "SqlSubgraphConnection",
    "create_connection",
    "list_sql_enabled_subgraphs",
    "find_subgraph",
    "search_subgraphs_by_ipfs_hashes",
    "selector_from_fields",
    "QueryResult",
    "SubgraphRecord",
    "SubgraphSelector",
    "SubgraphById",
    "SubgraphByDisplayName",
    "SubgraphByVersion",
    "SubgraphByDeployment",
    "SubgraphByIpfsHash",
    "SubgraphSqlError",
    "ConfigError",
    "SelectorError",
    "NotFoundError",
    "UnsupportedError",
    "NormalizationError",
    "TransportError",
    "GraphQLError",
    "DiscoveryError",
    "CancellationError",
]
