"""Monitoring configuration for the study tool."""
from prometheus_client import Counter, start_http_server

# Study metrics
answers_recorded = Counter(
    "vocabdeck_answers_total",
    "Total number of quiz answers recorded",
    ["result"],
)

words_toggled = Counter(
    "vocabdeck_words_toggled_total",
    "Total number of favorite/known toggles",
    ["flag"],
)

# Persistence metrics
state_saves = Counter(
    "vocabdeck_state_saves_total",
    "Total number of successful state saves",
)

state_save_errors = Counter(
    "vocabdeck_state_save_errors_total",
    "Total number of failed state saves",
)

state_imports = Counter(
    "vocabdeck_imports_total",
    "Total number of state imports",
    ["outcome"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
