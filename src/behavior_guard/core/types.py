"""Core types and enums."""

from enum import Enum


class EntityKind(str, Enum):
    """Kinds of monitored entities."""
    APPLICATION = "application"
    NETWORK_FLOW = "network_flow"
    DOMAIN = "domain"
    IP_ADDRESS = "ip_address"
    PROCESS = "process"
    USER = "user"
    DEVICE = "device"


class BootstrapMode(str, Enum):
    """Band used when judging a value against a batch-learned baseline.

    ONE_SIDED flags only values above mean + k*sigma (device metrics).
    TWO_SIDED flags values outside [mean - k*sigma, mean + k*sigma].
    """
    ONE_SIDED = "one_sided"
    TWO_SIDED = "two_sided"


class Severity(str, Enum):
    """Per-indicator severity grades."""
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RiskLevel(str, Enum):
    """Risk levels derived from an aggregate anomaly score."""
    SAFE = "Safe"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ThreatClass(str, Enum):
    """Closed set of threat classifications."""
    UNKNOWN = "unknown"
    SUSPICIOUS_NETWORK = "suspicious_network"
    DATA_EXFILTRATION = "data_exfiltration"
    COMMAND_AND_CONTROL = "command_and_control"
    CRYPTO_MINING = "crypto_mining"
    PRIVILEGE_ESCALATION = "privilege_escalation"
    PERSISTENCE = "persistence"
    EVASION = "evasion"
    MALICIOUS_PAYLOAD = "malicious_payload"
    PHISHING = "phishing"
    BENIGN = "benign"

    @property
    def display_name(self) -> str:
        return _THREAT_CLASS_TEXT[self][0]

    @property
    def description(self) -> str:
        return _THREAT_CLASS_TEXT[self][1]


_THREAT_CLASS_TEXT = {
    ThreatClass.UNKNOWN: ("Unknown", "Unclassified anomalous behavior"),
    ThreatClass.SUSPICIOUS_NETWORK: ("Suspicious Network", "Unusual network activity"),
    ThreatClass.DATA_EXFILTRATION: ("Data Exfiltration", "Potential data theft"),
    ThreatClass.COMMAND_AND_CONTROL: ("C2 Communication", "Possible C2 traffic"),
    ThreatClass.CRYPTO_MINING: ("Crypto Mining", "Resource abuse for mining"),
    ThreatClass.PRIVILEGE_ESCALATION: ("Privilege Escalation", "Attempting elevated access"),
    ThreatClass.PERSISTENCE: ("Persistence", "Establishing persistence"),
    ThreatClass.EVASION: ("Evasion", "Attempting to evade detection"),
    ThreatClass.MALICIOUS_PAYLOAD: ("Malicious Payload", "Suspicious code execution"),
    ThreatClass.PHISHING: ("Phishing", "Credential harvesting behavior"),
    ThreatClass.BENIGN: ("Benign", "Normal behavior"),
}
