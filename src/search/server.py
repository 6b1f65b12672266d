"""HTTP application (aiohttp.web).

Routes:
- POST /functions/v1/search-by-ingredients: remote search service
- POST /api/match: public match API backed by RecipeMatcher
- GET  /api/ingredients: known ingredient names for autocomplete
- POST /api/cache/invalidate: drop the cached catalog after an upstream reload
- GET  /health: liveness and cache state
"""

import json

from aiohttp import web
from pydantic import ValidationError

from src.matching.matcher import RecipeMatcher
from src.models.models import SearchRequest
from src.search.service import SearchService
from src.utils.errors import CatalogUnavailableError, InvalidSearchRequestError
from src.utils.logger import logger


SEARCH_PATH = "/functions/v1/search-by-ingredients"

MATCHER_KEY = web.AppKey("matcher", RecipeMatcher)
SERVICE_KEY = web.AppKey("search_service", SearchService)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


async def _read_json(request: web.Request) -> dict:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


def _error(status: int, error: str, message: str = "") -> web.Response:
    payload = {"error": error, "results": []}
    if message:
        payload["message"] = message
    return web.json_response(payload, status=status, headers=CORS_HEADERS)


async def search_by_ingredients(request: web.Request) -> web.Response:
    """Search-by-ingredients endpoint: 400 on empty ingredients, 500 on failure."""
    body = await _read_json(request)
    ingredients = body.get("ingredients")
    if not isinstance(ingredients, list) or not ingredients:
        return _error(400, "Ingredients array is required and cannot be empty")

    try:
        search_request = SearchRequest(
            ingredients=ingredients,
            limit=body.get("limit"),
            offset=body.get("offset"),
        )
        response = await request.app[SERVICE_KEY].search(search_request)
    except (ValidationError, InvalidSearchRequestError):
        return _error(400, "Ingredients array is required and cannot be empty")
    except Exception as e:
        logger.error(f"Search function error: {e}", exc_info=True)
        return _error(500, "Internal server error", str(e))

    return web.json_response(response.model_dump(), headers=CORS_HEADERS)


async def search_preflight(request: web.Request) -> web.Response:
    return web.Response(text="ok", headers=CORS_HEADERS)


async def match(request: web.Request) -> web.Response:
    """Public match API: `{"ingredients": [...]}` -> `{"results": [...], "total": n}`."""
    body = await _read_json(request)
    ingredients = body.get("ingredients") or []
    if not isinstance(ingredients, list):
        return _error(400, "ingredients must be a list of strings")
    ingredients = [item if isinstance(item, str) else "" for item in ingredients]

    try:
        results = await request.app[MATCHER_KEY].match_recipes(ingredients)
    except CatalogUnavailableError as e:
        logger.error(f"Recipe retrieval unavailable: {e}")
        return _error(503, "No results, retrieval unavailable")

    return web.json_response(
        {
            "results": [recipe.model_dump(by_alias=True) for recipe in results],
            "total": len(results),
        }
    )


async def ingredients(request: web.Request) -> web.Response:
    try:
        names = await request.app[MATCHER_KEY].get_all_ingredients()
    except CatalogUnavailableError as e:
        logger.error(f"Ingredient list unavailable: {e}")
        return web.json_response({"error": "Ingredients unavailable", "ingredients": []}, status=503)
    return web.json_response({"ingredients": names, "total": len(names)})


async def invalidate_cache(request: web.Request) -> web.Response:
    request.app[MATCHER_KEY].invalidate_cache()
    return web.json_response({"status": "invalidated"})


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "cache": request.app[MATCHER_KEY].cache.state})


def create_app(matcher: RecipeMatcher, service: SearchService) -> web.Application:
    """Build the aiohttp application around a matcher and a search service.

    Both usually share one RecipeCatalogCache so invalidation applies to both paths.
    """
    app = web.Application()
    app[MATCHER_KEY] = matcher
    app[SERVICE_KEY] = service

    app.router.add_post(SEARCH_PATH, search_by_ingredients)
    app.router.add_route("OPTIONS", SEARCH_PATH, search_preflight)
    app.router.add_post("/api/match", match)
    app.router.add_get("/api/ingredients", ingredients)
    app.router.add_post("/api/cache/invalidate", invalidate_cache)
    app.router.add_get("/health", health)
    return app
