# toddler_fun/client.py
import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class ClientError(Exception):
    def __init__(self, status_code, message):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(resp):
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.text or str(body)


class ActivityClient:
    # session: anything with requests.Session's request() (a TestClient works too)
    def __init__(self, base_url, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _call(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ClientError(None, f"Could not reach the activity service: {e}") from e
        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.error(f"API error ({resp.status_code}) on {method} {path}: {message}")
            raise ClientError(resp.status_code, message)
        try:
            return resp.json()
        except ValueError as e:
            raise ClientError(resp.status_code, f"Invalid JSON in response to {method} {path}") from e

    def list_activities(self):
        data = self._call("GET", "/activities")
        logger.debug(f"Fetched {len(data)} activities")
        return data

    def create_activity(self, category, title, description):
        body = {"category": category, "title": title, "description": description}
        return self._call("POST", "/activities", json=body)

    def update_activity(self, activity_id, **fields):
        body = {"id": activity_id, **{k: v for k, v in fields.items() if v is not None}}
        return self._call("PUT", "/activities", json=body)

    def set_completion_count(self, activity_id, count):
        return self._call("PUT", "/activities", json={"id": activity_id, "completionCount": count})

    def record_completion(self, activity_id):
        return self._call("POST", f"/activities/{activity_id}/completions")

    def delete_activity(self, activity_id):
        return self._call("DELETE", "/activities", params={"id": activity_id})
