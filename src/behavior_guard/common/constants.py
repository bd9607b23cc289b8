"""Centralized constants for Behavior Guard."""


# ===== PROFILING =====
class ProfileConstants:
    MAX_SAMPLES = 100
    MIN_RELIABLE_SAMPLES = 10
    EMA_RETAIN_WEIGHT = 0.9
    MIN_STD_DEV_SAMPLES = 3
    DEFAULT_STD_DEV = 1.0


# ===== BASELINE BOOTSTRAP =====
class BaselineConstants:
    MIN_BOOTSTRAP_SAMPLES = 20
    SIGMA_MULTIPLIER = 2.0
    SAMPLING_INTERVAL_SECONDS = 30.0
    LEARNING_DURATION_MINUTES = 60
    USAGE_HISTORY_HOURS = 24 * 7
    USAGE_CURRENT_HOURS = 24


# ===== SCORING =====
class ScoringConstants:
    ANOMALY_THRESHOLD = 2.5  # z-score
    THREAT_THRESHOLD = 0.7
    PER_INDICATOR_DIVISOR = 5.0
    PER_INDICATOR_CAP = 0.3
    RELIABLE_CONFIDENCE = 0.9
    UNRELIABLE_CONFIDENCE = 0.5
    URL_CONFIDENCE = 0.85
    MALFORMED_URL_CONFIDENCE = 0.9
    PHISHING_THRESHOLD = 0.5
    FALLBACK_RECOMMENDATION_SCORE = 0.5

    # Indicator severity grades
    SEVERITY_HIGH = 3.0
    SEVERITY_CRITICAL = 4.0


# ===== ALERTING =====
class AlertConstants:
    SUBSCRIBER_QUEUE_SIZE = 1000
    ANOMALY_ALERT_DEVIATION = 3.0
    QUEUE_GET_TIMEOUT = 1.0


# ===== USAGE STATS =====
class UsageConstants:
    MS_PER_HOUR = 1000 * 60 * 60
    BYTES_PER_MB = 1024 * 1024
    BACKGROUND_MIN_FOREGROUND_MS = 1000 * 60 * 60
    BACKGROUND_IDLE_HOURS = 6.0
    HIGH_NETWORK_USAGE_MB = 1024.0
