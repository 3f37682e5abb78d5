import yaml
import os
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class BonusTier(BaseModel):
    """Minimum covering margin (inclusive) and the bonus it earns."""
    min_margin: float
    bonus: int


class ScoringConfig(BaseModel):
    """
    Point values for resolved submissions.

    win:  base_points + margin_bonus (+ margin_bonus again on a lock)
    push: push_points, regardless of side or lock
    loss: 0
    """
    base_points: int = 20
    push_points: int = 10
    # Evaluated highest first; the first tier whose min_margin is met wins
    bonus_tiers: List[BonusTier] = Field(default_factory=lambda: [
        BonusTier(min_margin=29, bonus=5),
        BonusTier(min_margin=20, bonus=3),
        BonusTier(min_margin=11, bonus=1),
    ])

    @field_validator('bonus_tiers')
    @classmethod
    def sort_tiers(cls, tiers: List[BonusTier]) -> List[BonusTier]:
        return sorted(tiers, key=lambda t: t.min_margin, reverse=True)


class BatchConfig(BaseModel):
    """Batch resolution settings."""
    chunk_size: int = 25
    chunk_pause_seconds: float = 0.05
    retry_attempts: int = 3
    retry_wait_seconds: float = 0.5
    lock_file: str = "/tmp/pickscore_batch.lock"


class PrecedenceConfig(BaseModel):
    picks_per_period: int = 6
    locks_per_period: int = 1


class LeaderboardConfig(BaseModel):
    # Best finish covers the last N weeks of the regular season
    best_finish_weeks: int = 4
    season_final_week: Optional[int] = 14
    default_limit: Optional[int] = None


class CacheConfig(BaseModel):
    enabled: bool = True
    redis_url: Optional[str] = None  # Falls back to REDIS_URL / localhost
    ttl_seconds: int = 3600
    # Last good snapshots outlive invalidation and serve as the read fallback
    last_good_ttl_seconds: int = 7 * 24 * 60 * 60


class WebConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class AppConfig(BaseModel):
    # No database section; the engine reads DATABASE_URL (database/database.py)
    scoring: ScoringConfig = ScoringConfig()
    batch: BatchConfig = BatchConfig()
    precedence: PrecedenceConfig = PrecedenceConfig()
    leaderboard: LeaderboardConfig = LeaderboardConfig()
    cache: CacheConfig = CacheConfig()
    web: WebConfig = WebConfig()


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try the repo root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if not data.get('cache'):
            data['cache'] = {}
        data['cache']['redis_url'] = env_redis_url

    return AppConfig(**data)
