from fastapi.responses import HTMLResponse, RedirectResponse, Response

from hubproxy.config import ProxyConfig

# Looks like a fresh nginx install, so scanners learn nothing about the proxy
DECOY_PAGE = """<!DOCTYPE html>
<html>
<head>
<title>Welcome to nginx!</title>
<style>
body { width: 35em; margin: 0 auto; font-family: Tahoma, Verdana, Arial, sans-serif; }
</style>
</head>
<body>
<h1>Welcome to nginx!</h1>
<p>If you see this page, the nginx web server is successfully installed and working. Further configuration is required.</p>
<p><em>Thank you for using nginx.</em></p>
</body>
</html>
"""


def render_denial(config: ProxyConfig) -> Response:
    if config.redirect_url:
        return RedirectResponse(config.redirect_url, status_code=302)
    # HTMLResponse sends text/html; charset=utf-8
    return HTMLResponse(DECOY_PAGE, status_code=200)
