from stairup.core.config import Settings
from stairup.core.logger import get_logger
from stairup.enums import GatewayBackend
from stairup.gateways.base import RemoteDataGateway
from stairup.gateways.rest_gateway import RestGateway
from stairup.gateways.database_gateway import DatabaseGateway

logger = get_logger("gateway_factory")


def build_gateway(settings: Settings) -> RemoteDataGateway:
    """Select the remote data service binding named by GATEWAY_BACKEND."""
    backend = GatewayBackend(settings.GATEWAY_BACKEND)

    if backend == GatewayBackend.DATABASE:
        logger.info("Using hosted backend binding (direct database access)")
        return DatabaseGateway(
            database_url=settings.DATABASE_URL,
            token_ttl_hours=settings.TOKEN_TTL_HOURS
        )

    logger.info(f"Using REST backend binding at {settings.API_BASE_URL}")
    return RestGateway(
        base_url=settings.API_BASE_URL,
        api_version=settings.API_VERSION,
        timeout=settings.REQUEST_TIMEOUT_SECONDS
    )
