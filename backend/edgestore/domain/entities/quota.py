"""Derived capacity state and eviction outcome — never persisted."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class QuotaState:
    """Snapshot of estimated storage usage against the configured ceiling."""

    usage_bytes: int
    usage_percentage: float
    near_capacity: bool
    quota_bytes: int


@dataclass(frozen=True)
class QuotaErrorInfo:
    """Payload carried by StorageQuotaError and the out-of-band quota signal."""

    usage_percentage: float
    usage_bytes: int
    quota_bytes: int

    def to_payload(self) -> dict[str, float | int]:
        return {
            "usagePercentage": self.usage_percentage,
            "usageBytes": self.usage_bytes,
            "quotaBytes": self.quota_bytes,
        }


@dataclass
class EvictionReport:
    """Result of one eviction pass over the submission collections."""

    bytes_needed: int
    bytes_freed: int = 0
    removed: dict[str, int] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)
    success_ratio: float = 0.5

    @property
    def success(self) -> bool:
        """Eviction counts as successful once it freed the configured share of the need."""
        return self.bytes_freed >= self.bytes_needed * self.success_ratio

    @property
    def total_removed(self) -> int:
        return sum(self.removed.values())
