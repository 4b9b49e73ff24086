"""Pydantic schemas for the cache inspection endpoints."""

from pydantic import BaseModel, Field


class CacheStatsResponse(BaseModel):
    size: int = Field(..., description="Tracked entries, including expired ones not yet touched")
    hits: int
    misses: int
    hit_rate: float = Field(..., description="Hit percentage since the last clear")
    route_entries: int = Field(0, description="Entries held by the route decision cache")


class InvalidateResponse(BaseModel):
    tag: str
    removed: int
