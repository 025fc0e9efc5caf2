from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheStatisticsData(BaseModel):
    """Cache statistics model."""

    model_config = ConfigDict(ser_json_timedelta="iso8601", ser_json_bytes="utf8")

    hits: int
    misses: int
    sets: int
    deletes: int
    errors: int
    total_bytes_written: int
    total_bytes_read: int
    hit_rate: str
    total_requests: int
    created_at: str
    last_updated_at: str


class CacheHealthResponse(BaseModel):
    """Cache health response model."""

    backend: str
    statistics: CacheStatisticsData
    status: str
    # Redis-specific fields
    latency_ms: float | None = None
    connected_clients: int | None = None
    used_memory_human: str | None = None
    uptime_seconds: int | None = None
    redis_version: str | None = None
    # In-memory-specific fields
    info: dict[str, Any] | None = None
    error: str | None = None


class FlushReport(BaseModel):
    """Outcome of one view-count flush."""

    flushed: list[int] = Field(default_factory=list)
    failed: list[int] = Field(default_factory=list)
    skipped: bool = False
