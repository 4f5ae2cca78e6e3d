"""
HTTP routes exposing referrer analysis.

Usage:
    app.include_router(create_referrer_router(config), prefix="/referrers")
"""

import logging

from fastapi import APIRouter, Query

from .classifier import detect_search_engine
from .config import ReferrerConfig
from .models import (
    LossyHostResponse,
    ReferrerResponse,
    SearchEngineResponse,
    SearchEngineSummary,
)
from .referrer import classify_referrer

logger = logging.getLogger(__name__)

# Host names are at most 253 characters
MAX_HOST_LENGTH = 253


def create_referrer_router(config: ReferrerConfig | None = None) -> APIRouter:
    """Create the referrer analysis router.

    Args:
        config: Referrer configuration (defaults to ReferrerConfig())
    """
    config = config or ReferrerConfig()
    registry = config.build_registry()
    max_length = config.max_referrer_length

    router = APIRouter(tags=["referrers"])

    @router.get("/search-engine", response_model=SearchEngineResponse)
    async def search_engine(url: str = Query(..., max_length=max_length)):
        """Detect the search engine and keyword of a referrer URL."""
        match = detect_search_engine(url, registry=registry)
        if match is None:
            return SearchEngineResponse(referrer=url)

        search_url = None
        if match.keyword:
            search_url = registry.get_search_url(match.name, match.keyword)
        return SearchEngineResponse(
            referrer=url,
            matched=True,
            name=match.name,
            keyword=match.keyword,
            search_url=search_url,
        )

    @router.get("/referrer", response_model=ReferrerResponse)
    async def referrer(url: str = Query("", max_length=max_length)):
        """Classify a referrer into a traffic source."""
        info = classify_referrer(url, current_domain=config.site_domain, registry=registry)
        return ReferrerResponse(
            referrer=url,
            type=info.type.value,
            domain=info.domain,
            source_name=info.source_name,
            keyword=info.keyword,
        )

    @router.get("/lossy-host", response_model=LossyHostResponse)
    async def lossy_host(host: str = Query(..., min_length=1, max_length=MAX_HOST_LENGTH)):
        """Get the lossy form of a host."""
        host = host.strip().lower()
        return LossyHostResponse(host=host, lossy_host=registry.lossy_host(host))

    @router.get("/search-engines", response_model=list[SearchEngineSummary])
    async def search_engines():
        """List the known search engines with their primary definition."""
        summaries = []
        for name in registry.names():
            key = registry.get_primary_key(name)
            rule = registry.get(key)
            summaries.append(
                SearchEngineSummary(
                    name=name,
                    url=key,
                    keyword_parameters=[
                        spec.parameter if spec.parameter else spec.pattern.pattern
                        for spec in rule.keyword_specs
                    ],
                    charsets=list(rule.charsets),
                )
            )
        logger.debug(f"Listed {len(summaries)} search engines")
        return summaries

    return router
