import logging

from hubproxy.proxy.models import RequestInfo


def describe_request(info: RequestInfo) -> str:
    return f"clientIp: {info.client_ip}, user-agent: {info.user_agent}, url: {info.url}"


def log_request_error(logger: logging.Logger, info: RequestInfo, message: str) -> None:
    """Log a denial or upstream failure with who asked for what."""
    logger.error(f"{message}, {describe_request(info)}")
