# frontend/api_client.py
"""
HTTP client for the SAM Climatiza API.

Reads go through a cache keyed by endpoint path. Mutations never touch the
cache themselves; callers invalidate the keys they affected so the next read
refetches.
"""
import logging
from typing import Any, Dict, Optional

import requests

from frontend.settings import ClientSettings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request that did not come back 2xx, or never came back at all"""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    def __repr__(self):
        return f'<ApiError status={self.status} message={self.message!r}>'


class ApiClient:

    def __init__(self, settings: Optional[ClientSettings] = None, session=None):
        self.settings = settings or ClientSettings()
        self.session = session or requests.Session()
        self.cache: Dict[str, Any] = {}

    def url_for(self, path: str) -> str:
        return f"{self.settings.base_url}{path}"

    def request(self, method: str, path: str, json=None, files=None) -> Any:
        """
        Send one request and decode its JSON body.

        Raises:
            ApiError: non-2xx response or a network failure
        """
        try:
            response = self.session.request(
                method,
                self.url_for(path),
                json=json,
                files=files,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(None, f"Network error: {e}")

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            logger.warning(f"{method} {path} -> {response.status_code}: {message}")
            raise ApiError(response.status_code, message)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _error_message(response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get('error') or body.get('message')
            if message:
                return message
        text = response.text or response.reason or ''
        return f"{response.status_code}: {text}"

    # Reads

    def get(self, path: str, use_cache: bool = True) -> Any:
        """Cached read; a failed fetch raises but leaves any cached value in place"""
        if use_cache and path in self.cache:
            return self.cache[path]
        data = self.request('GET', path)
        self.cache[path] = data
        return data

    def cached(self, path: str, default=None) -> Any:
        return self.cache.get(path, default)

    def invalidate(self, *paths: str):
        """
        Mark cached reads stale. A path also drops its sub-paths and query
        variants, so '/api/quotes' clears '/api/quotes/3' and '/api/quotes?clientId=1'.
        """
        for path in paths:
            for key in list(self.cache):
                if key == path or key.startswith(path + '/') or key.startswith(path + '?'):
                    del self.cache[key]

    # Mutations

    def post(self, path: str, data=None) -> Any:
        return self.request('POST', path, json=data)

    def put(self, path: str, data=None) -> Any:
        return self.request('PUT', path, json=data)

    def delete(self, path: str) -> Any:
        return self.request('DELETE', path)

    def upload(self, path: str, field: str, filename: str, content: bytes,
               content_type: str = 'application/octet-stream') -> Any:
        """Single multipart POST with one file field"""
        return self.request('POST', path, files={field: (filename, content, content_type)})

    # Session

    def login(self, username: str, password: str) -> Dict[str, Any]:
        user = self.post('/api/login', {'username': username, 'password': password})
        self.cache['/api/user'] = user
        return user

    def logout(self):
        try:
            self.post('/api/logout')
        finally:
            self.cache.clear()

    def current_user(self) -> Dict[str, Any]:
        return self.get('/api/user')
