from typing import Dict, List, Mapping, Optional, Tuple
from starlette.responses import Response


class CookieJar:
    """Request cookies plus the writes queued for the response.

    Reads see queued writes, so a handler that sets a cookie and later reads
    it back within the same request gets the new value.
    """

    def __init__(self, request_cookies: Optional[Mapping[str, str]] = None, secure: bool = False):
        self._cookies: Dict[str, str] = dict(request_cookies or {})
        self._pending: List[Tuple[str, Optional[str], int]] = []
        self.secure = secure

    def get(self, name: str) -> Optional[str]:
        return self._cookies.get(name)

    def set(self, name: str, value: str, max_age: int) -> None:
        self._cookies[name] = value
        self._pending.append((name, value, max_age))

    def delete(self, name: str) -> None:
        self._cookies.pop(name, None)
        self._pending.append((name, None, 0))

    def apply(self, response: Response) -> Response:
        """Write queued cookie changes onto an outgoing response."""
        for name, value, max_age in self._pending:
            if value is None:
                response.delete_cookie(name, path="/", secure=self.secure, httponly=True, samesite="lax")
            else:
                response.set_cookie(
                    name,
                    value,
                    max_age=max_age,
                    path="/",
                    secure=self.secure,
                    httponly=True,
                    samesite="lax",
                )
        self._pending.clear()
        return response
