"""
Pydantic models for the font embedding service.

These models define the request payloads accepted by the API and the
intermediate records passed between the stages of the embedding pipeline.

License: MIT
"""

from enum import Enum
from typing import List as ListType, Optional, Literal
from pydantic import BaseModel, Field, field_validator


DEFAULT_WEIGHTS = ["400"]


class FontRequest(BaseModel):
    """One family to embed, with the weights to request from Google Fonts."""
    family: str = Field(..., description="Google Font family name (e.g., 'Roboto', 'Open Sans')")
    weights: ListType[str] = Field(
        default_factory=lambda: list(DEFAULT_WEIGHTS),
        description="Weight tokens, e.g. ['400', '700']"
    )

    @field_validator("family")
    @classmethod
    def _require_family(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("family must not be empty")
        return v

    @field_validator("weights", mode="before")
    @classmethod
    def _coerce_weights(cls, v):
        """Accept numbers and single values; fall back to regular weight."""
        if v is None:
            return list(DEFAULT_WEIGHTS)
        if isinstance(v, (str, int)) and not isinstance(v, bool):
            v = [v]
        if not isinstance(v, list):
            raise ValueError("weights must be a list")
        weights = []
        for weight in v:
            if isinstance(weight, bool) or not isinstance(weight, (str, int)):
                raise ValueError(f"invalid weight: {weight!r}")
            weight = str(weight).strip()
            if weight:
                weights.append(weight)
        return weights or list(DEFAULT_WEIGHTS)

    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {"family": "Roboto", "weights": ["400", "700"]}
        }


class FaceDescriptor(BaseModel):
    """A single @font-face rule found in a Google Fonts stylesheet."""
    weight: str = "400"
    style: str = "normal"
    url: str = Field(..., description="Font file locator")


class EmbeddedResource(BaseModel):
    """A downloaded font file encoded for use in a data URI."""
    url: str
    payload: str = Field(..., description="Base64 encoded font bytes")
    format: Literal["woff2", "woff", "truetype"]


class EmbeddedStylesheet(BaseModel):
    """Self-contained CSS for one family."""
    family: str
    css: str


class FamilyStage(str, Enum):
    """Progress of a single family through the pipeline."""
    RESOLVING = "resolving"
    EXTRACTING = "extracting"
    INLINING = "inlining"
    ASSEMBLING = "assembling"
    DONE = "done"
    SKIPPED = "skipped"


class EmbedResult(BaseModel):
    """Response body of the embed-fonts endpoint."""
    css: str = ""
    fonts_embedded: int = Field(default=0, alias="fontsEmbedded")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class FontSearchOptions(BaseModel):
    """Filters forwarded to the Google Fonts Developer API."""
    sort: Optional[Literal["alpha", "date", "popularity", "style", "trending"]] = None
    category: Optional[Literal["serif", "sans-serif", "display", "handwriting", "monospace"]] = None
    subset: Optional[str] = None

    def cache_key(self) -> tuple:
        return (self.sort, self.category, self.subset)
