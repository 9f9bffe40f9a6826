# Prefix for environment variables that back the CLI flags
ENV_PREFIX = "JAIL_EXPORTER_"

# Web server defaults
DEFAULT_WEB_LISTEN_ADDRESS = "127.0.0.1:9452"
DEFAULT_WEB_TELEMETRY_PATH = "/metrics"

# Node Exporter textfile collector only picks up files with this extension
OUTPUT_FILE_EXTENSION = ".prom"

# Sentinel for "write metrics to stdout"
STDOUT_SENTINEL = "-"

# Access log line: remote, request line, status, body size, duration (seconds)
ACCESS_LOG_FORMAT = '%a "%r" %s %b %Tf'

# Metric namespace
METRIC_NAMESPACE = "jail"
