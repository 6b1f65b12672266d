"""Data models and schemas for the recipe matching service.

Defines Pydantic models for catalog records, transient scoring results,
the remote search wire contract, and the ranked output returned to callers.
All models use Pydantic v2 for validation and JSON serialization.
"""

from typing import Annotated, Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_LIMIT = 20
MAX_LIMIT = 100

DIFFICULTY_LEVELS = ("Easy", "Medium", "Hard")


class Recipe(BaseModel):
    """Domain model for a catalog recipe.

    `ingredients` is the ordered source of truth for matching. Everything except
    id and title is optional; remote search results carry no ingredient list.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[str, Field(min_length=1, description="Unique recipe identifier")]
    title: Annotated[str, Field(min_length=1, max_length=200, description="Recipe name or title (1-200 chars)")]
    description: Annotated[Optional[str], Field(None, description="Short description")]
    image_url: Annotated[Optional[str], Field(None, max_length=500, description="URL to recipe image")]
    ingredients: Annotated[List[str], Field(default_factory=list, description="Ordered ingredient names")]
    steps: Annotated[List[str], Field(default_factory=list, description="Cooking steps")]
    time_min: Annotated[Optional[int], Field(None, ge=0, description="Preparation time in minutes")]
    difficulty: Annotated[Optional[Literal["Easy", "Medium", "Hard"]], Field(None, description="Difficulty tier")]
    rating: Annotated[Optional[float], Field(None, ge=0, le=5, description="Rating 0-5, one decimal")]
    servings: Annotated[Optional[int], Field(None, ge=1, description="Number of servings")]
    cuisine: Annotated[Optional[str], Field(None, description="Cuisine label")]
    tags: Annotated[List[str], Field(default_factory=list, description="Free-form tags")]
    nutrition: Annotated[Optional[dict[str, Any]], Field(None, description="Nutrition facts per serving")]

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        """Accept integer ids from static data."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("difficulty", mode="before")
    @classmethod
    def drop_unknown_difficulty(cls, value: Any) -> Optional[str]:
        """Unknown difficulty labels are stored as None rather than rejected."""
        return value if value in DIFFICULTY_LEVELS else None

    @field_validator("rating", mode="after")
    @classmethod
    def round_rating(cls, value: Optional[float]) -> Optional[float]:
        """Ratings carry one decimal."""
        return round(value, 1) if value is not None else None

    @field_validator("ingredients", "steps", "tags", mode="before")
    @classmethod
    def none_to_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value


class MatchResult(BaseModel):
    """Per-recipe scoring outcome from the match scorer."""

    matched_count: int = 0
    partial_count: int = 0
    score: Annotated[float, Field(0.0, ge=0.0, le=1.0)]
    matched_names: List[str] = Field(default_factory=list)
    total_ingredients: int = 0


class ScoredCandidate(BaseModel):
    """A recipe that survived retrieval, with its score.

    Transient: created during scoring, discarded once the page is returned.
    """

    recipe: Recipe
    score: Annotated[float, Field(ge=0.0, le=1.0)]
    matched_names: List[str] = Field(default_factory=list)
    matched_count: int = 0
    partial_count: int = 0
    total_ingredients: int = 0


class ResultPage(BaseModel):
    """One page of ranked candidates plus the pre-pagination total."""

    items: List[ScoredCandidate] = Field(default_factory=list)
    total: Annotated[int, Field(ge=0)]
    limit: Annotated[int, Field(ge=1, le=MAX_LIMIT)]
    offset: Annotated[int, Field(ge=0)]


class SearchRequest(BaseModel):
    """Request body accepted by the remote search service.

    limit defaults to 20 when missing or non-positive and is capped at 100.
    offset defaults to 0; negative values are treated as 0.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    ingredients: Annotated[List[str], Field(min_length=1, description="Raw ingredient names (at least one)")]
    limit: Annotated[int, Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)]
    offset: Annotated[int, Field(0, ge=0)]

    @field_validator("ingredients", mode="before")
    @classmethod
    def drop_non_strings(cls, value: Any) -> Any:
        """Keep only string entries; null or numeric entries carry no ingredient."""
        if isinstance(value, list):
            return [item for item in value if isinstance(item, str)]
        return value

    @field_validator("limit", mode="before")
    @classmethod
    def clamp_limit(cls, value: Any) -> int:
        try:
            limit = int(value)
        except (TypeError, ValueError):
            return DEFAULT_LIMIT
        if limit <= 0:
            return DEFAULT_LIMIT
        return min(limit, MAX_LIMIT)

    @field_validator("offset", mode="before")
    @classmethod
    def clamp_offset(cls, value: Any) -> int:
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            return 0


class SearchResult(BaseModel):
    """One scored recipe in a remote search response."""

    recipe_id: str
    title: str
    image_url: Optional[str] = None
    score: Annotated[float, Field(ge=0.0, le=1.0)]
    matched: List[str] = Field(default_factory=list)
    total_ingredients: Annotated[int, Field(0, ge=0)]
    cuisine: Optional[str] = None
    difficulty: Optional[str] = None
    time_min: Optional[int] = None
    rating: Optional[float] = None

    @field_validator("recipe_id", mode="before")
    @classmethod
    def coerce_recipe_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("matched", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("total_ingredients", mode="before")
    @classmethod
    def none_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class SearchResponse(BaseModel):
    """Response body of the remote search service."""

    results: List[SearchResult] = Field(default_factory=list)
    total: Annotated[int, Field(0, ge=0)]
    limit: Annotated[int, Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)]
    offset: Annotated[int, Field(0, ge=0)]


class RankedRecipe(Recipe):
    """Public output of match_recipes: recipe fields plus match annotations.

    Serialize with `model_dump(by_alias=True)` to get camelCase match fields
    (`matchScore`, `matchPercentage`, `totalIngredients`).
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    match_score: Annotated[float, Field(0.0, ge=0.0, le=1.0, alias="matchScore")]
    match_percentage: Annotated[int, Field(0, ge=0, le=100, alias="matchPercentage")]
    matched: List[str] = Field(default_factory=list)
    total_ingredients: Annotated[Optional[int], Field(None, alias="totalIngredients")]
