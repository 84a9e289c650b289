from tldrank.core.logging import configure_logging

# keep stdout for the reports; structured logs at WARNING and above only
configure_logging(json_logs=True, level="WARNING")
