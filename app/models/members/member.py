"""Board member model - voter identity and email preferences."""

MEMBER_DDL = """
CREATE TABLE IF NOT EXISTS member (
    id VARCHAR PRIMARY KEY,
    full_name VARCHAR NOT NULL,
    email VARCHAR NOT NULL,
    position VARCHAR,
    role VARCHAR NOT NULL,
    is_active BOOLEAN DEFAULT TRUE,
    email_notifications_enabled BOOLEAN DEFAULT TRUE,
    voting_email_notifications BOOLEAN DEFAULT TRUE,
    voting_summaries BOOLEAN DEFAULT TRUE,
    voting_reminders BOOLEAN DEFAULT TRUE,
    system_notifications BOOLEAN DEFAULT TRUE,
    digest_frequency VARCHAR DEFAULT 'immediate',
    preferred_format VARCHAR DEFAULT 'html',
    last_email_sent TIMESTAMP,
    bounce_reason VARCHAR,
    bounced_at TIMESTAMP
)
"""

MEMBER_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_member_role ON member(role)",
]
