from typing import Optional, List, Dict, Any, Literal, Union, Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from subgraph_sql.core.errors import SelectorError


# =========================
# SUBGRAPH RECORD
# =========================
class SubgraphRecord(BaseModel):
    """
    Canonical subgraph + current deployment info.

    Built only by the registry normalizers, both response shapes
    (subgraphs / deployments) end up here.
    """

    id: str
    display_name: str
    description: Optional[str]
    image: Optional[str]
    current_version: str
    deployment_id: str
    network: str
    deployment_schema_id: str
    active_indexer_allocations: int
    ipfs_hash: str
    sql_indexers: Optional[int] = None

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    def with_sql_indexers(self, count: int) -> "SubgraphRecord":
        return self.model_copy(update={"sql_indexers": count})


# =========================
# SELECTOR (one variant per lookup strategy)
# =========================
class SubgraphById(BaseModel):
    """The subgraph id (ie: DZz4kDTdmzWLWsV373w2bSmoar3umKKH9y82SUKr5qmp)"""

    kind: Literal["id"] = "id"
    id: str = Field(min_length=1)
    model_config = ConfigDict(frozen=True)


class SubgraphByDisplayName(BaseModel):
    """
    Exact display name (ie: Graph Network Arbitrum).
    Not unique, the first registry match wins.
    """

    kind: Literal["displayName"] = "displayName"
    display_name: str = Field(min_length=1)
    model_config = ConfigDict(frozen=True)


class SubgraphByVersion(BaseModel):
    """Current version id (ie: DZz4kDTdmzWLWsV373w2bSmoar3umKKH9y82SUKr5qmp-1)"""

    kind: Literal["version"] = "version"
    version: str = Field(min_length=1)
    model_config = ConfigDict(frozen=True)


class SubgraphByDeployment(BaseModel):
    """Deployment id (ie: 0xab90a94d90bf57554adbbaec92fade3bccebd4dad4e00179c3de560f6c6fa5b0)"""

    kind: Literal["deployment"] = "deployment"
    deployment: str = Field(min_length=1)
    model_config = ConfigDict(frozen=True)


class SubgraphByIpfsHash(BaseModel):
    """Deployment ipfs hash (ie: QmZtNN8NbxjJ1KD5uKBYa7Gj29CT8xypSXnAmXbrLNTQgX)"""

    kind: Literal["ipfs"] = "ipfs"
    ipfs: str = Field(min_length=1)
    model_config = ConfigDict(frozen=True)


SubgraphSelector = Annotated[
    Union[
        SubgraphById,
        SubgraphByDisplayName,
        SubgraphByVersion,
        SubgraphByDeployment,
        SubgraphByIpfsHash,
    ],
    Field(discriminator="kind"),
]


def selector_from_fields(
    id: Optional[str] = None,
    display_name: Optional[str] = None,
    version: Optional[str] = None,
    deployment: Optional[str] = None,
    ipfs: Optional[str] = None,
) -> SubgraphSelector:
    """
    Build a selector from loose optional fields.

    Priority when several are given: id, display name, version,
    deployment, ipfs hash. Empty strings count as unset.
    """
    if id:
        return SubgraphById(id=id)
    if display_name:
        return SubgraphByDisplayName(display_name=display_name)
    if version:
        return SubgraphByVersion(version=version)
    if deployment:
        return SubgraphByDeployment(deployment=deployment)
    if ipfs:
        return SubgraphByIpfsHash(ipfs=ipfs)
    raise SelectorError(
        "subgraph must have one of these fields defined: "
        "id, displayName, version, deployment or ipfs hash"
    )


# =========================
# GRAPHQL ENVELOPE
# =========================
class GraphQLRequest(BaseModel):
    query: str
    variables: Dict[str, Any] = {}
    operation_name: str = Field(alias="operationName")
    extensions: Dict[str, Any] = {}

    model_config = ConfigDict(populate_by_name=True)

    def with_variables(self, **variables: Any) -> "GraphQLRequest":
        """Copy of this template with the given variables set."""
        body = self.model_copy(deep=True)
        body.variables.update(variables)
        return body


# =========================
# SQL RESULT
# =========================
class SqlOutput(BaseModel):
    columns: List[str]
    rows: List[Dict[str, Any]]
    row_count: int = Field(alias="rowCount")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class SqlData(BaseModel):
    sql: SqlOutput
    model_config = ConfigDict(extra="allow")


class QueryResult(BaseModel):
    data: SqlData
    model_config = ConfigDict(extra="allow")


# =========================
# API PAYLOADS
# =========================
class SubgraphLookup(BaseModel):
    id: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    version: Optional[str] = None
    deployment: Optional[str] = None
    ipfs: Optional[str] = None
    testnet: bool = False

    model_config = ConfigDict(populate_by_name=True)

    def to_selector(self) -> SubgraphSelector:
        return selector_from_fields(
            id=self.id,
            display_name=self.display_name,
            version=self.version,
            deployment=self.deployment,
            ipfs=self.ipfs,
        )


class SqlExecuteRequest(SubgraphLookup):
    query: str = Field(min_length=1)


class SqlEnabledSubgraphs(BaseModel):
    total: int
    subgraphs: List[SubgraphRecord] = []
