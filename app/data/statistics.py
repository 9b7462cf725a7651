"""Cache statistics tracking."""

from dataclasses import asdict, dataclass, field

from app.utils import today_str


@dataclass
class CacheStatistics:
    """Counters for cache traffic, reported by the health endpoint."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    errors: int = 0
    total_bytes_written: int = 0
    total_bytes_read: int = 0
    created_at: str = field(default_factory=today_str)

    def record_hit(self, bytes_read: int = 0) -> None:
        self.hits += 1
        self.total_bytes_read += bytes_read

    def record_miss(self) -> None:
        self.misses += 1

    def record_set(self, bytes_written: int = 0) -> None:
        self.sets += 1
        self.total_bytes_written += bytes_written

    def record_delete(self, count: int = 1) -> None:
        self.deletes += count

    def record_error(self) -> None:
        self.errors += 1

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate as a percentage (0-100)."""
        total = self.total_requests
        return (self.hits / total * 100) if total > 0 else 0.0

    def reset(self) -> None:
        for name, value in asdict(CacheStatistics()).items():
            setattr(self, name, value)

    def to_dict(self) -> dict[str, int | str]:
        return {
            **asdict(self),
            "hit_rate": f"{self.hit_rate:.2f}%",
            "total_requests": self.total_requests,
        }
