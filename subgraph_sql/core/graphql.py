import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from subgraph_sql.core.cancellation import run_cancellable
from subgraph_sql.core.config import settings
from subgraph_sql.core.errors import GraphQLError, TransportError
from subgraph_sql.core.schemas import GraphQLRequest

logger = logging.getLogger(__name__)

GRAPHQL_HEADERS = {
    "accept": "application/graphql-response+json, application/json, multipart/mixed",
    "accept-language": "en-US,en;q=0.5",
    "content-type": "application/json",
}


@asynccontextmanager
async def http_client(
    client: Optional[httpx.AsyncClient] = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Use the caller's client if given, otherwise open one for this call only."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as own_client:
        yield own_client


async def call_graphql(
    endpoint: str,
    body: GraphQLRequest,
    cancel_event: Optional[asyncio.Event] = None,
    authorization: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """
    POST a GraphQL envelope and return the parsed JSON body.

    Args:
        endpoint: GraphQL endpoint url
        body: query / variables / operationName / extensions
        cancel_event: set it to abort the in-flight request
        authorization: Authorization header value ("" when omitted)
        client: shared httpx client, a throwaway one is used otherwise

    Raises:
        TransportError: non-2xx status or no response at all
        GraphQLError: the envelope carries a non-empty `errors` list
        CancellationError: cancel_event fired
    """
    headers = {**GRAPHQL_HEADERS, "Authorization": authorization or ""}
    payload = body.model_dump(by_alias=True)

    async with http_client(client) as http:
        try:
            response = await run_cancellable(
                http.post(endpoint, json=payload, headers=headers), cancel_event
            )
        except httpx.RequestError as error:
            logger.error(f"{body.operation_name} request to {endpoint} failed: {error}")
            raise TransportError(str(error)) from error

    if not response.is_success:
        logger.error(
            f"{body.operation_name} request to {endpoint} returned {response.status_code}"
        )
        raise TransportError(response.reason_phrase, status_code=response.status_code)

    try:
        json_response = response.json()
    except ValueError as error:
        raise TransportError(f"invalid JSON body from {endpoint}") from error

    errors = json_response.get("errors") if isinstance(json_response, dict) else None
    if errors:
        if not isinstance(errors, list):
            errors = [errors]
        messages = [
            e.get("message", "") if isinstance(e, dict) else str(e) for e in errors
        ]
        logger.error(f"{body.operation_name} returned {len(messages)} GraphQL error(s)")
        raise GraphQLError(messages)

    return json_response
