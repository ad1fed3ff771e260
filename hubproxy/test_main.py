import logging
from unittest.mock import patch

from hubproxy import __main__ as entrypoint


def test_main_runs_uvicorn_on_configured_port(caplog):
    with patch.object(entrypoint, "uvicorn") as uvicorn:
        with caplog.at_level(logging.INFO, logger="uvicorn.error"):
            entrypoint.main()

    uvicorn.Config.assert_called_once_with(
        "hubproxy.server:app",
        host=entrypoint.HOST,
        port=entrypoint.PORT,
        log_level=entrypoint.LOG_LEVEL,
    )
    uvicorn.Server.return_value.run.assert_called_once()
    assert f"Proxy server starting on port {entrypoint.PORT}" in caplog.text
