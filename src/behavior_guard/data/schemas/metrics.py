"""Metric payload schemas - what metric sources hand to the engine.

All fields are required and non-negative. Each payload flattens into
the metric-name -> float mapping used by behavioral profiles.
"""

from typing import ClassVar

from pydantic import BaseModel, Field


class AppBehaviorMetrics(BaseModel):
    """Per-application resource and permission-use counters."""

    cpu_usage: float = Field(..., ge=0.0, le=100.0, description="CPU usage percent")
    memory_usage_mb: int = Field(..., ge=0, description="Resident memory in MB")
    network_requests_per_min: int = Field(..., ge=0)
    background_wakeups: int = Field(..., ge=0)
    permission_accesses: int = Field(..., ge=0)
    file_operations: int = Field(..., ge=0)
    clipboard_accesses: int = Field(..., ge=0)
    location_requests: int = Field(..., ge=0)
    camera_accesses: int = Field(..., ge=0)
    microphone_accesses: int = Field(..., ge=0)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "cpu_usage": 12.5,
                "memory_usage_mb": 180,
                "network_requests_per_min": 8,
                "background_wakeups": 2,
                "permission_accesses": 1,
                "file_operations": 14,
                "clipboard_accesses": 0,
                "location_requests": 0,
                "camera_accesses": 0,
                "microphone_accesses": 0,
            }
        }
    }

    @classmethod
    def zero(cls) -> "AppBehaviorMetrics":
        """All-zero payload used when a source fails."""
        return cls(
            cpu_usage=0.0,
            memory_usage_mb=0,
            network_requests_per_min=0,
            background_wakeups=0,
            permission_accesses=0,
            file_operations=0,
            clipboard_accesses=0,
            location_requests=0,
            camera_accesses=0,
            microphone_accesses=0,
        )

    def to_metrics_map(self) -> dict[str, float]:
        return {
            "cpu_usage": float(self.cpu_usage),
            "memory_mb": float(self.memory_usage_mb),
            "network_rpm": float(self.network_requests_per_min),
            "bg_wakeups": float(self.background_wakeups),
            "permission_accesses": float(self.permission_accesses),
            "file_ops": float(self.file_operations),
            "clipboard_accesses": float(self.clipboard_accesses),
            "location_requests": float(self.location_requests),
            "camera_accesses": float(self.camera_accesses),
            "microphone_accesses": float(self.microphone_accesses),
        }


class NetworkBehaviorMetrics(BaseModel):
    """Aggregate counters for one network flow or endpoint."""

    connection_count: int = Field(..., ge=0)
    unique_destinations: int = Field(..., ge=0)
    bytes_transmitted: int = Field(..., ge=0)
    bytes_received: int = Field(..., ge=0)
    avg_packet_size: float = Field(..., ge=0.0)
    port_count: int = Field(..., ge=0)
    failed_connections: int = Field(..., ge=0)
    encrypted_connections: int = Field(..., ge=0)
    unusual_ports: int = Field(..., ge=0, description="Connections to known C2/backdoor ports")
    connection_frequency: float = Field(..., ge=0.0, description="Connections per minute")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "connection_count": 40,
                "unique_destinations": 6,
                "bytes_transmitted": 120_000,
                "bytes_received": 900_000,
                "avg_packet_size": 512.0,
                "port_count": 3,
                "failed_connections": 1,
                "encrypted_connections": 38,
                "unusual_ports": 0,
                "connection_frequency": 4.0,
            }
        }
    }

    @classmethod
    def zero(cls) -> "NetworkBehaviorMetrics":
        """All-zero payload used when a source fails."""
        return cls(
            connection_count=0,
            unique_destinations=0,
            bytes_transmitted=0,
            bytes_received=0,
            avg_packet_size=0.0,
            port_count=0,
            failed_connections=0,
            encrypted_connections=0,
            unusual_ports=0,
            connection_frequency=0.0,
        )

    @property
    def tx_rx_ratio(self) -> float:
        return self.bytes_transmitted / max(self.bytes_received, 1)

    @property
    def failed_ratio(self) -> float:
        return self.failed_connections / max(self.connection_count, 1)

    def to_metrics_map(self) -> dict[str, float]:
        return {
            "connection_count": float(self.connection_count),
            "unique_destinations": float(self.unique_destinations),
            "bytes_tx": float(self.bytes_transmitted),
            "bytes_rx": float(self.bytes_received),
            "avg_packet_size": float(self.avg_packet_size),
            "port_count": float(self.port_count),
            "failed_connections": float(self.failed_connections),
            "encrypted_ratio": self.encrypted_connections / max(self.connection_count, 1),
            "unusual_ports": float(self.unusual_ports),
            "connection_frequency": float(self.connection_frequency),
        }


class DeviceMetrics(BaseModel):
    """Whole-device health counters polled while learning a device baseline."""

    battery_drain: float = Field(default=0.0, ge=0.0, description="Drain rate, percent per hour")
    cpu_usage: float = Field(default=0.0, ge=0.0, description="CPU usage percent")
    network_activity: float = Field(default=0.0, ge=0.0, description="Bytes per second")
    screen_on_time: float = Field(default=0.0, ge=0.0, description="Minutes")
    background_process_count: float = Field(default=0.0, ge=0.0)
    data_usage: float = Field(default=0.0, ge=0.0, description="Megabytes")

    model_config = {"frozen": True}

    # screen_on_time is reported but not baselined
    BASELINE_METRICS: ClassVar[tuple[str, ...]] = (
        "battery_drain",
        "cpu_usage",
        "network_activity",
        "background_process_count",
        "data_usage",
    )

    def to_metrics_map(self) -> dict[str, float]:
        return {name: float(getattr(self, name)) for name in self.BASELINE_METRICS}
