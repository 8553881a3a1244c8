"""Prometheus metrics for monitoring risk levels, alert volume and collaborator health"""

from prometheus_client import Counter, Histogram

# Assessment metrics
assessment_counter = Counter(
    "payroll_sentinel_assessment_total",
    "Total risk assessments performed",
    ["risk_level"],  # safe | warning | critical
)

risk_score_histogram = Histogram(
    "payroll_sentinel_risk_score",
    "Distribution of computed risk scores",
    buckets=[10, 20, 40, 60, 80, 100],
)

# Alert metrics
alerts_sent_counter = Counter(
    "payroll_sentinel_alerts_sent_total",
    "Alerts delivered to the notification channel",
    ["alert_type"],
)

alerts_suppressed_counter = Counter(
    "payroll_sentinel_alerts_suppressed_total",
    "Alert candidates dropped before dispatch",
    ["reason"],  # cooldown | daily_cap | duplicate_type | muted
)

notification_failure_counter = Counter(
    "notification_failures_total",
    "Failed notification deliveries",
)

# Collaborator metrics
collaborator_failures_counter = Counter(
    "collaborator_failures_total",
    "Failed calls to external collaborators",
    ["collaborator"],  # bank | payroll | slack
)

collaborator_latency_histogram = Histogram(
    "collaborator_latency_seconds",
    "External collaborator response time",
    ["collaborator"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_assessment(risk_level: str, risk_score: int) -> None:
    """Record assessment metrics for monitoring the risk distribution"""
    assessment_counter.labels(risk_level=risk_level).inc()
    risk_score_histogram.observe(risk_score)
