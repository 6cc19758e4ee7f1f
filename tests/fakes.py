"""Fake registry + SQL gateway used by the test suite."""

import json
from typing import Any, Dict, List, Optional

import httpx

from subgraph_sql.core.config import settings

EBO_IPFS = "QmY22FRbSGS6WGzoMimP7h29CyqAJRe6QkrDrpokqVt4R4"
EBO_DEPLOYMENT = "0x8f2f9ab0a0d3a1fd2a0e3c4ee4b3b9d1d3c0c0a0d1f1e0a7d4c7a6e9b2c1d0e0"
NETWORK_IPFS = "QmZtNN8NbxjJ1KD5uKBYa7Gj29CT8xypSXnAmXbrLNTQgX"
NETWORK_DEPLOYMENT = "0xab90a94d90bf57554adbbaec92fade3bccebd4dad4e00179c3de560f6c6fa5b0"


def make_deployment(
    subgraph_id: str,
    display_name: str,
    deployment_id: str,
    ipfs_hash: str,
    allocations: int = 2,
    network: str = "arbitrum-one",
) -> Dict[str, Any]:
    """Raw element of `data.deployments` as the registry returns it."""
    return {
        "id": deployment_id,
        "ipfsHash": ipfs_hash,
        "indexerAllocations": [
            {"activeForIndexer": {"id": f"0xindexer{i}"}} for i in range(allocations)
        ],
        "manifest": {"network": network, "schema": {"id": f"{ipfs_hash}-schema"}},
        "versions": [
            {
                "id": f"{subgraph_id}-1",
                "version": 1,
                "subgraph": {
                    "id": subgraph_id,
                    "metadata": {
                        "displayName": display_name,
                        "image": f"https://img.example/{subgraph_id}.png",
                        "description": f"{display_name} description",
                    },
                },
            }
        ],
    }


def as_subgraph(deployment: Dict[str, Any]) -> Dict[str, Any]:
    """Same fixture reshaped as an element of `data.subgraphs`."""
    version = deployment["versions"][0]
    return {
        "id": version["subgraph"]["id"],
        "metadata": version["subgraph"]["metadata"],
        "currentVersion": {
            "id": version["id"],
            "version": version["version"],
            "subgraphDeployment": {
                key: deployment[key]
                for key in ("id", "ipfsHash", "indexerAllocations", "manifest")
            },
        },
    }


class FakeNetwork:
    """
    In-memory registry + SQL gateway behind an httpx.MockTransport.

    Registry requests are answered by filtering `deployments` with the
    `where` filter the request carries, the same way the network subgraph does.
    """

    def __init__(self):
        self.deployments: List[Dict[str, Any]] = [
            make_deployment("EBOsubgraph", "Graph EBO Arbitrum", EBO_DEPLOYMENT, EBO_IPFS),
            make_deployment(
                "DZz4kDTdmzWLWsV373w2bSmoar3umKKH9y82SUKr5qmp",
                "Graph Network Arbitrum",
                NETWORK_DEPLOYMENT,
                NETWORK_IPFS,
                allocations=5,
            ),
        ]
        self.discovery: Any = {EBO_IPFS: 3, NETWORK_IPFS: 0}
        self.sql_result: Dict[str, Any] = {
            "data": {
                "sql": {"columns": ["?column?"], "rows": [{"?column?": 1}], "rowCount": 1}
            }
        }
        self.registry_errors: Optional[List[Dict[str, Any]]] = None
        self.status_overrides: Dict[str, int] = {}
        self.requests: List[httpx.Request] = []

    # ---- request log helpers ----
    def requests_to(self, path_part: str) -> List[httpx.Request]:
        return [r for r in self.requests if path_part in str(r.url)]

    @property
    def registry_bodies(self) -> List[Dict[str, Any]]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.url.host == httpx.URL(settings.NETWORK_SUBGRAPH_API).host
        ]

    # ---- registry ----
    def _match_deployment(self, deployment, where) -> bool:
        if "id" in where and deployment["id"] != where["id"]:
            return False
        if "ipfsHash" in where and deployment["ipfsHash"] != where["ipfsHash"]:
            return False
        if "ipfsHash_in" in where and deployment["ipfsHash"] not in where["ipfsHash_in"]:
            return False
        return True

    def _match_subgraph(self, subgraph, where) -> bool:
        if "id" in where and subgraph["id"] != where["id"]:
            return False
        if "metadata_" in where and (
            subgraph["metadata"]["displayName"] != where["metadata_"]["displayName"]
        ):
            return False
        if "currentVersion_" in where and (
            subgraph["currentVersion"]["id"] != where["currentVersion_"]["id"]
        ):
            return False
        return True

    def _registry(self, body: Dict[str, Any]) -> Dict[str, Any]:
        where = body["variables"]["where"]
        if "deployments: subgraphDeployments" in body["query"]:
            data = {
                "deployments": [
                    d for d in self.deployments if self._match_deployment(d, where)
                ]
            }
        else:
            subgraphs = [as_subgraph(d) for d in self.deployments]
            data = {"subgraphs": [s for s in subgraphs if self._match_subgraph(s, where)]}

        response: Dict[str, Any] = {"data": data}
        if self.registry_errors:
            response["errors"] = self.registry_errors
        return response

    # ---- transport entry point ----
    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        for path_part, status_code in self.status_overrides.items():
            if path_part in str(request.url):
                return httpx.Response(status_code)

        if request.url.path == "/discovery":
            if isinstance(self.discovery, str):
                return httpx.Response(200, text=self.discovery)
            return httpx.Response(200, json=self.discovery)

        if request.url.path.startswith("/api/deployments/id/"):
            return httpx.Response(200, json=self.sql_result)

        return httpx.Response(200, json=self._registry(json.loads(request.content)))
