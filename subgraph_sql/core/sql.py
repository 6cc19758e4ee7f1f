import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from subgraph_sql.core.errors import NormalizationError
from subgraph_sql.core.graphql import call_graphql
from subgraph_sql.core.schemas import GraphQLRequest, QueryResult

logger = logging.getLogger(__name__)

SQL_QUERY_TEMPLATE = GraphQLRequest(
    query="""query SQL($query: String!) {
        sql(input: {query: $query}) {
            ... on SqlJSONOutput {
                columns
                rows
                rowCount
            }
        }
    }""",
    variables={"query": ""},
    operation_name="SQL",
    extensions={},
)


async def execute_subgraph_sql(
    endpoint: str,
    query: str,
    cancel_event: Optional[asyncio.Event] = None,
    authorization: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> QueryResult:
    """
    Execute a SQL query on a SQL enabled graph-node behind the gateway.

    The SQL text is passed through as-is, the gateway validates it.

    Args:
        endpoint: deployment GraphQL endpoint on the gateway
        query: SQL query to execute
        cancel_event: set it to abort the request
        authorization: Authorization header value (Bearer <key>)
        client: shared httpx client

    Returns:
        columns / rows / rowCount under data.sql

    Raises:
        NormalizationError: data.sql is missing or not the SqlJSONOutput shape
    """
    body = SQL_QUERY_TEMPLATE.with_variables(query=query)

    logger.info(f"Executing SQL against {endpoint}")
    json_response = await call_graphql(endpoint, body, cancel_event, authorization, client)

    try:
        return QueryResult.model_validate(json_response)
    except ValidationError as error:
        # ie: another `sql` union member, or `sql: null`
        raise NormalizationError(
            f"SQL response is not a SqlJSONOutput: {error.error_count()} problem(s)"
        ) from error
