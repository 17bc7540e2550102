"""
Minimal JSON-over-HTTP helper built on urllib.request.
Non-2xx answers come back as HttpResponse objects; only transport failures raise.
"""
import http.client
import json
import urllib.error
import urllib.request

from utils.errors import ProviderUnavailable


class HttpResponse:
    def __init__(self, status, body=""):
        self.status = status
        self.body = body

    @property
    def ok(self):
        return 200 <= self.status < 300

    def json(self):
        """Parsed JSON body, or {} when the body is empty or not an object."""
        try:
            data = json.loads(self.body) if self.body else {}
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def __repr__(self):
        return f"<HttpResponse {self.status}>"


def send_json(method, url, payload=None, headers=None, timeout=None):
    """
    Send a JSON request and return an HttpResponse.

    Args:
        method: HTTP method
        url: Absolute URL
        payload: JSON-serializable body (optional)
        headers: Extra request headers
        timeout: Socket timeout in seconds

    Raises:
        ProviderUnavailable: any transport failure (unreachable host, timeout, bad URL, truncated body)
    """
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    try:
        req = urllib.request.Request(url, data=data, method=method)
        req.add_header("Content-Type", "application/json")
        req.add_header("Accept", "application/json")
        for name, value in (headers or {}).items():
            req.add_header(name, value)
        with urllib.request.urlopen(req, timeout=timeout) as r:
            return HttpResponse(r.status, r.read().decode("utf-8", "replace"))
    except urllib.error.HTTPError as e:
        try:
            body = e.read().decode("utf-8", "replace")
        except (OSError, http.client.HTTPException):
            body = ""
        return HttpResponse(e.code, body)
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
        raise ProviderUnavailable(f"{method} {url} failed: {e}")
