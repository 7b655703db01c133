"""Cache statistics models."""

from __future__ import annotations

from pydantic import BaseModel, Field

STAGES = ("sizes", "resized", "cropped", "enhanced")


class StageStats(BaseModel):
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class CacheStats(BaseModel):
    """Aggregate cache statistics, per stage."""

    entries: int = 0
    size_mb: float = 0.0
    stages: dict[str, StageStats] = Field(
        default_factory=lambda: {name: StageStats() for name in STAGES}
    )
    background_write_failures: int = 0

    @property
    def hits(self) -> int:
        return sum(s.hits for s in self.stages.values())

    @property
    def misses(self) -> int:
        return sum(s.misses for s in self.stages.values())

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def record_hit(self, stage: str) -> None:
        self.stages[stage].hits += 1

    def record_miss(self, stage: str) -> None:
        self.stages[stage].misses += 1
