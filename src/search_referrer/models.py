"""Pydantic models for the referrer API."""

from pydantic import BaseModel, Field


class SearchEngineResponse(BaseModel):
    """Search engine detection result for one referrer."""

    referrer: str
    matched: bool = False
    name: str | None = None
    keyword: str | None = None  # "" when the engine hides the keyword
    search_url: str | None = None  # Result page for the keyword


class ReferrerResponse(BaseModel):
    """Traffic source classification for one referrer."""

    referrer: str = ""
    type: str  # direct, search, internal, website
    domain: str | None = None
    source_name: str | None = None
    keyword: str | None = None


class LossyHostResponse(BaseModel):
    """Lossy form of a host."""

    host: str
    lossy_host: str


class SearchEngineSummary(BaseModel):
    """A search engine known to the registry."""

    name: str
    url: str  # Primary host pattern
    keyword_parameters: list[str] = Field(default_factory=list)
    charsets: list[str] = Field(default_factory=list)
