from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Fallback key used when create_connection() is called without one
    GATEWAY_API_KEY: Optional[str] = None

    NETWORK_SUBGRAPH_API: str = (
        "https://api.thegraph.com/subgraphs/name/graphprotocol/graph-network-arbitrum"
    )
    NETWORK_SUBGRAPH_TESTNET_API: str = (
        "https://api.thegraph.com/subgraphs/name/graphprotocol/graph-network-arbitrum-sepolia"
    )
    SQL_GATEWAY_URL: str = "https://sql.gateway.thegraph.semiotic.ai"

    # None = no timeout, callers bound latency with a cancel event
    HTTP_TIMEOUT: Optional[float] = None
    LOG_LEVEL: str = "INFO"

    # This tells Pydantic to read from the .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create a single instance of the settings to use everywhere
settings = Settings()
