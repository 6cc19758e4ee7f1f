from typing import List, Optional


class SubgraphSqlError(Exception):
    """Base class for every failure raised by this package."""


# =========================
# Configuration / input
# =========================
class ConfigError(SubgraphSqlError):
    """No API key was passed and GATEWAY_API_KEY is not set."""


class SelectorError(ConfigError):
    """The subgraph selector has none of its identifying fields set."""


# =========================
# Lookup results
# =========================
class NotFoundError(SubgraphSqlError):
    """The registry has no subgraph matching the selector."""


class UnsupportedError(SubgraphSqlError):
    """The resolved deployment has no indexer serving SQL."""


class NormalizationError(SubgraphSqlError):
    """An upstream response is missing a field the client models need."""


# =========================
# Wire level
# =========================
class TransportError(SubgraphSqlError):
    """
    Request failed before a GraphQL envelope could be read.

    status_code is None when the request never got a response
    (DNS failure, refused connection, ...).
    """

    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Failed to fetch GraphQL endpoint: {reason}")
        self.reason = reason
        self.status_code = status_code


class GraphQLError(SubgraphSqlError):
    def __init__(self, messages: List[str]):
        super().__init__("\n".join(messages))
        self.messages = messages


class DiscoveryError(SubgraphSqlError):
    """The gateway discovery endpoint was unreachable or returned garbage."""


class CancellationError(SubgraphSqlError):
    """The caller's cancel event fired while a request was in flight."""
