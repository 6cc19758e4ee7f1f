from fastapi import APIRouter
from subgraph_sql.api.endpoints import subgraphs, sql

api_router = APIRouter()

# Combine all sub-routers into one
api_router.include_router(subgraphs.router)
api_router.include_router(sql.router)
