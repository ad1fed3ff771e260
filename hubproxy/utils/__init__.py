from hubproxy.utils.request_log import describe_request, log_request_error

__all__ = ["describe_request", "log_request_error"]
