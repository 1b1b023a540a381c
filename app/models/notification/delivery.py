"""Delivery log model - one row per recipient per bulk send."""

DELIVERY_LOG_DDL = """
CREATE TABLE IF NOT EXISTS delivery_log (
    id VARCHAR PRIMARY KEY,
    decision_id VARCHAR,
    recipient_id VARCHAR NOT NULL,
    email VARCHAR NOT NULL,
    notification_kind VARCHAR NOT NULL,
    success BOOLEAN NOT NULL,
    error VARCHAR,
    attempts INTEGER NOT NULL,
    delivery_time_ms INTEGER,
    sent_at TIMESTAMP NOT NULL
)
"""

DELIVERY_LOG_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_delivery_log_sent_at ON delivery_log(sent_at)",
]
