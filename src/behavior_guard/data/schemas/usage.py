"""Usage-stats record schemas - canonical definition."""

from pydantic import BaseModel, Field

from behavior_guard.common.constants import UsageConstants


class UsageRecord(BaseModel):
    """One usage-stats bucket for an installed package.

    Timestamps are epoch milliseconds, as reported by the OS usage-stats API.
    """
    package_name: str = Field(..., min_length=1)
    app_name: str = Field(default="", description="User-visible label")
    total_time_in_foreground_ms: int = Field(..., ge=0)
    last_time_used_ms: int = Field(..., ge=0)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "package_name": "com.example.notes",
                "app_name": "Notes",
                "total_time_in_foreground_ms": 1_800_000,
                "last_time_used_ms": 1_769_351_400_000,
            }
        }
    }

    @property
    def foreground_hours(self) -> float:
        return self.total_time_in_foreground_ms / UsageConstants.MS_PER_HOUR


class NetworkUsageRecord(BaseModel):
    """Byte counters for one network interface type (wifi, mobile, ...)."""
    network_type: str = Field(..., min_length=1)
    rx_bytes: int = Field(..., ge=0)
    tx_bytes: int = Field(..., ge=0)

    model_config = {"frozen": True}

    @property
    def total_mb(self) -> float:
        return (self.rx_bytes + self.tx_bytes) / UsageConstants.BYTES_PER_MB

    @property
    def rx_mb(self) -> float:
        return self.rx_bytes / UsageConstants.BYTES_PER_MB

    @property
    def tx_mb(self) -> float:
        return self.tx_bytes / UsageConstants.BYTES_PER_MB
