import logging
from typing import Optional

import config
from tryon.exceptions import ProviderConfigurationError
from tryon.providers.base import GenerationProvider
from tryon.providers.gateway import GatewayProvider
from tryon.providers.vertex import VertexProvider

logger = logging.getLogger(__name__)

PROVIDER_NAMES = ("vertex", "gateway")


def build_provider(name: Optional[str] = None) -> GenerationProvider:
    """Builds the adapter selected by GENERATION_PROVIDER (or ``name`` when given)."""
    name = (name or config.GENERATION_PROVIDER or "vertex").lower()
    logger.info(f"Building generation provider: {name}")
    if name == "vertex":
        return VertexProvider(
            model=config.VERTEX_MODEL,
            project=config.GOOGLE_PROJECT_ID,
            location=config.GOOGLE_LOCATION,
            api_key=config.GEMINI_API_KEY,
        )
    if name == "gateway":
        return GatewayProvider(
            api_key=config.GATEWAY_API_KEY,
            url=config.GATEWAY_URL,
            model=config.GATEWAY_MODEL,
        )
    raise ProviderConfigurationError(f"Unknown generation provider '{name}'. Expected one of {PROVIDER_NAMES}")
