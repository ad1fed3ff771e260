import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "hub-mirror-proxy")
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")

# Empty keeps every path available to the proxy
METRICS_PATH = os.getenv("METRICS_PATH", "")

DEFAULT_PROXY_HOSTNAME = "registry-1.docker.io"
DEFAULT_PROXY_PROTOCOL = "https"
