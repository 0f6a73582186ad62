"""Pydantic models for tool input validation.

These models define the argument schemas advertised to the LLM for every
tool. Field names are what the model sends, so the Overseerr ids keep the
camelCase used by the upstream APIs.
"""

from pydantic import BaseModel, ConfigDict, Field

_INPUT_CONFIG = ConfigDict(str_strip_whitespace=True, extra="forbid")


class NoInput(BaseModel):
    """Tools that take no arguments."""

    model_config = _INPUT_CONFIG


# ============================================================================
# Plex
# ============================================================================


class PlexSearchInput(BaseModel):
    model_config = _INPUT_CONFIG

    query: str = Field(
        ...,
        description="Search query (title, keyword, or actor name)",
        min_length=1,
    )


class PlexAvailabilityInput(BaseModel):
    model_config = _INPUT_CONFIG

    title: str = Field(
        ...,
        description="Title of the movie or TV show to check",
        min_length=1,
    )


# ============================================================================
# Sonarr / Radarr
# ============================================================================


class SeriesSearchInput(BaseModel):
    model_config = _INPUT_CONFIG

    term: str = Field(..., description="TV series title to search for", min_length=1)


class CalendarInput(BaseModel):
    model_config = _INPUT_CONFIG

    days: int = Field(
        default=7,
        description="Number of days to look ahead (default 7)",
        ge=1,
        le=90,
    )


class MovieSearchInput(BaseModel):
    model_config = _INPUT_CONFIG

    term: str = Field(..., description="Movie title to search for", min_length=1)


# ============================================================================
# Overseerr
# ============================================================================


class OverseerrSearchInput(BaseModel):
    model_config = _INPUT_CONFIG

    query: str = Field(
        ...,
        description="Search query (movie or TV show title)",
        min_length=1,
    )


class RequestMovieInput(BaseModel):
    model_config = _INPUT_CONFIG

    tmdbId: int = Field(..., description="TMDB ID of the movie to request", gt=0)


class RequestTvInput(BaseModel):
    model_config = _INPUT_CONFIG

    tvdbId: int = Field(..., description="TVDB ID of the TV show to request", gt=0)
    seasons: list[int] | None = Field(
        default=None,
        description="Specific season numbers to request (omit for all)",
    )
