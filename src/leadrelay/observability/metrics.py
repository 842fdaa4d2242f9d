"""Prometheus metrics for Lead Relay.

Defines operational metrics for monitoring and alerting. Exposed by the
status API at /metrics.
"""

from prometheus_client import Counter, Gauge, Histogram

# Message processing metrics
messages_processed_total = Counter(
    "leadrelay_messages_processed_total",
    "Total number of message processing attempts",
    ["status"]  # status: success|failed
)

message_processing_duration_seconds = Histogram(
    "leadrelay_message_processing_duration_seconds",
    "Time spent processing a single message in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

# Lead metrics
leads_upserted_total = Counter(
    "leadrelay_leads_upserted_total",
    "Total leads stored",
    ["source", "outcome"]  # outcome: created|merged
)

replies_sent_total = Counter(
    "leadrelay_replies_sent_total",
    "Total acknowledgment replies sent"
)

replies_skipped_total = Counter(
    "leadrelay_replies_skipped_total",
    "Replies skipped because the lead was already answered"
)

# Run metrics
runs_total = Counter(
    "leadrelay_runs_total",
    "Total coordinator runs",
    ["outcome"]  # outcome: completed|lock_contended|lock_lost|error
)

run_duration_seconds = Histogram(
    "leadrelay_run_duration_seconds",
    "Coordinator run duration in seconds",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0]
)

# Alerting
alerts_sent_total = Counter(
    "leadrelay_alerts_sent_total",
    "Webhook alerts delivered",
    ["channel", "status"]  # channel: slack|discord, status: success|error
)

# Dead-letter depth (refreshed by the status endpoint)
failed_messages_gauge = Gauge(
    "leadrelay_failed_messages",
    "Processing records currently in FAILED status"
)
