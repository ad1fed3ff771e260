import logging

import uvicorn

from hubproxy.vars import HOST, PORT, LOG_LEVEL

logger = logging.getLogger("uvicorn.error")


def main():
    config = uvicorn.Config("hubproxy.server:app", host=HOST, port=PORT, log_level=LOG_LEVEL)
    server = uvicorn.Server(config)
    logger.info(f"Proxy server starting on port {PORT}")
    server.run()


if __name__ == "__main__":
    main()
