"""Recipe Matcher Application - HTTP service.

Single entry point for the ingredient-to-recipe matching service:
- Builds the recipe catalog (hosted store with bundled fallback, or bundled only)
- Shares one read-through catalog cache between the match API and the search function
- Wires the remote search client when a hosted store is configured
- Serves the HTTP API via aiohttp.web

Run with: python app.py
"""

from aiohttp import web

from src.catalog.cache import RecipeCatalogCache
from src.catalog.catalog import build_catalog
from src.matching.matcher import build_matcher
from src.matching.scoring import ScoreFormula
from src.matching.substitutions import get_substitution_graph
from src.search.server import create_app
from src.search.service import SearchService
from src.utils.config import config
from src.utils.logger import logger


def build_app() -> web.Application:
    """Wire collaborators from configuration and return the aiohttp application."""
    logger.info("Configuring recipe catalog...")
    cache = RecipeCatalogCache(build_catalog(config))

    matcher = build_matcher(config, cache=cache)
    service = SearchService(
        cache,
        graph=get_substitution_graph(config.SYNONYM_EXPANSION),
        formula=ScoreFormula(config.SEARCH_SCORE_FORMULA),
        retrieve_partial_matches=config.RETRIEVE_PARTIAL_MATCHES,
    )

    logger.info(
        f"Scoring: local={config.LOCAL_SCORE_FORMULA}, search={config.SEARCH_SCORE_FORMULA}, "
        f"synonyms={config.SYNONYM_EXPANSION}"
    )
    return create_app(matcher, service)


if __name__ == "__main__":
    logger.info(f"Starting Recipe Matcher on {config.HOST}:{config.PORT}")
    logger.info(f"Match API at: http://localhost:{config.PORT}/api/match")
    web.run_app(build_app(), host=config.HOST, port=config.PORT, print=None)
