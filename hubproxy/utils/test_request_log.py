import logging

from hubproxy.utils import describe_request, log_request_error


def test_describe_request(make_info):
    info = make_info(
        path="/v2/",
        client_ip="198.51.100.2",
        headers={"user-agent": "docker/24.0"},
    )

    assert describe_request(info) == (
        "clientIp: 198.51.100.2, user-agent: docker/24.0, url: https://mirror.example.com/v2/"
    )


def test_log_request_error(make_info, caplog):
    logger = logging.getLogger("hubproxy.test")
    info = make_info(client_ip="198.51.100.2")

    with caplog.at_level(logging.ERROR, logger="hubproxy.test"):
        log_request_error(logger, info, "Invalid")

    assert len(caplog.records) == 1
    assert caplog.records[0].levelno == logging.ERROR
    assert caplog.records[0].getMessage().startswith("Invalid, clientIp: 198.51.100.2")
