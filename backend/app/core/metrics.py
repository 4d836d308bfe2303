"""Prometheus metrics for the application"""
from prometheus_client import Counter, REGISTRY


def _counter(name: str, documentation: str, labelnames=()):
    """Create a counter, reusing the registered one on module reload"""
    try:
        return Counter(name, documentation, labelnames)
    except ValueError:
        return REGISTRY._names_to_collectors.get(name)


# Send pipeline metrics
emails_sent_counter = _counter(
    'mly_emails_sent_total',
    'Total number of send attempts by logged outcome',
    ['status']
)

email_send_rejections_counter = _counter(
    'mly_email_send_rejections_total',
    'Total number of send requests rejected before dispatch',
    ['kind']
)

# Auth metrics
api_key_auth_failures_counter = _counter(
    'mly_api_key_auth_failures_total',
    'Total number of rejected API key authentications'
)

session_resolution_counter = _counter(
    'mly_session_resolutions_total',
    'Total number of session cookie resolutions by outcome',
    ['outcome']
)

login_attempts_counter = _counter(
    'mly_login_attempts_total',
    'Total number of login attempts',
    ['status']
)
