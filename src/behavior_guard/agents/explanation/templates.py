"""Explanation templates - separated for maintainability."""

from behavior_guard.core.types import ThreatClass

NORMAL_EXPLANATION = "No significant anomalies detected. Behavior appears normal."

MALFORMED_URL_EXPLANATION = "URL is malformed and cannot be parsed"

MAX_EXPLAINED_ANOMALIES = 3

RECOMMENDATIONS = {
    ThreatClass.DATA_EXFILTRATION: [
        "Review app permissions and revoke unnecessary access",
        "Check for unauthorized data transfers",
        "Consider uninstalling the app",
    ],
    ThreatClass.COMMAND_AND_CONTROL: [
        "Disconnect from network immediately",
        "Run a full malware scan",
        "Check for unknown installed apps",
    ],
    ThreatClass.CRYPTO_MINING: [
        "Check battery and CPU usage",
        "Identify and remove mining apps",
        "Monitor device temperature",
    ],
    ThreatClass.PHISHING: [
        "Do not enter any credentials",
        "Verify URL with official source",
        "Report the suspicious URL",
    ],
    ThreatClass.SUSPICIOUS_NETWORK: [
        "Review recent network connections",
        "Check for unauthorized apps",
        "Consider using a VPN",
    ],
    ThreatClass.MALICIOUS_PAYLOAD: [
        "Block this URL",
        "Do not click",
    ],
}

FALLBACK_RECOMMENDATIONS = [
    "Monitor for continued suspicious activity",
    "Review recent app installations",
]

# Usage and device detectors
BACKGROUND_ABUSE_DESCRIPTION = "App active in background for extended period without user interaction"
BACKGROUND_ABUSE_RECOMMENDATION = "Review app permissions and consider restricting background activity"
HIGH_NETWORK_DESCRIPTION = "Unusually high data usage on {network_type}"
HIGH_NETWORK_RECOMMENDATION = "Check which apps are using excessive data"
