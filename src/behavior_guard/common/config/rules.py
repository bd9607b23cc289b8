"""Detection rules - heuristic word lists and weights.

Defaults live on the model. A YAML rules file can override any subset
of them (see config/detection_rules.yaml).
"""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from behavior_guard.common.exceptions import ConfigurationError


DEFAULT_SUSPICIOUS_TLDS = [
    "xyz", "tk", "ml", "ga", "cf", "gq", "top", "club", "work", "click",
]

DEFAULT_PATH_KEYWORDS = [
    "login", "signin", "account", "verify", "secure", "update", "confirm",
]

# Common RAT, classic backdoor, "leet" and IRC ports
DEFAULT_SUSPICIOUS_PORTS = [
    4444, 5555, 6666, 7777, 8888, 9999,
    31337, 12345, 54321,
    1337, 1338, 1339,
    6667, 6668, 6669,
]


class UrlWeights(BaseModel):
    """Score contributed by each URL heuristic."""
    ip_host: float = Field(default=0.30, ge=0.0, le=1.0)
    long_host: float = Field(default=0.20, ge=0.0, le=1.0)
    many_subdomains: float = Field(default=0.25, ge=0.0, le=1.0)
    suspicious_tld: float = Field(default=0.25, ge=0.0, le=1.0)
    path_keyword: float = Field(default=0.10, ge=0.0, le=1.0)
    excessive_encoding: float = Field(default=0.15, ge=0.0, le=1.0)
    homoglyph: float = Field(default=0.40, ge=0.0, le=1.0)


class UrlLimits(BaseModel):
    """Cutoffs for URL heuristics."""
    max_host_length: int = Field(default=50, ge=1)
    max_subdomains: int = Field(default=3, ge=0)
    max_encoded_triplets: int = Field(default=5, ge=0)


class DetectionRules(BaseModel):
    """Heuristic rule set used by the URL and network classifiers."""

    version: str = Field(default="1.0.0", description="Rule set version")
    suspicious_tlds: list[str] = Field(default_factory=lambda: list(DEFAULT_SUSPICIOUS_TLDS))
    path_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_PATH_KEYWORDS))
    suspicious_ports: list[int] = Field(default_factory=lambda: list(DEFAULT_SUSPICIOUS_PORTS))
    url_weights: UrlWeights = Field(default_factory=UrlWeights)
    url_limits: UrlLimits = Field(default_factory=UrlLimits)

    @property
    def suspicious_port_set(self) -> frozenset[int]:
        return frozenset(self.suspicious_ports)


def load_rules(path: Optional[Union[str, Path]] = None) -> DetectionRules:
    """Load detection rules from a YAML file.

    Args:
        path: Rules file. Built-in defaults are returned when None.

    Returns:
        Validated DetectionRules

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    if path is None:
        return DetectionRules()

    rules_path = Path(path)
    if not rules_path.exists():
        raise ConfigurationError(
            f"Rules file not found: {rules_path}",
            details={"path": str(rules_path)},
        )

    try:
        with open(rules_path, "r") as f:
            raw_rules = yaml.safe_load(f) or {}
        return DetectionRules.model_validate(raw_rules)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Rules file is not valid YAML: {e}",
            details={"path": str(rules_path)},
        ) from e
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Rules file failed validation: {e.error_count()} error(s)",
            details={"path": str(rules_path), "errors": e.errors()},
        ) from e
