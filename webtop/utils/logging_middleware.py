import logging
import re
import time
import uuid
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("webtop.access")

# /v1/<area>[/<target>][/<action...>], e.g. /v1/windows/3/move
_SHELL_PATH = re.compile(r"^/v1/(?P<area>[a-z]+)(?:/(?P<target>[^/]+))?(?:/(?P<action>.+))?$")
_QUIET_PREFIXES = ("/static/", "/health")


def describe_shell_request(method: str, path: str) -> Tuple[Optional[str], Optional[str]]:
    """Name the shell area/target and the action a request performs.

    ``POST /v1/windows/3/move`` is ``("windows/3", "move")``; a bare
    collection call such as ``POST /v1/windows`` is ``("windows", "post")``.
    Paths outside ``/v1`` are not shell actions.
    """
    match = _SHELL_PATH.match(path)
    if match is None:
        return None, None
    area, target, action = match.group("area", "target", "action")
    subject = f"{area}/{target}" if target else area
    return subject, action or method.lower()


def _active_desktop(request: Request) -> Optional[str]:
    shell = getattr(request.app.state, "shell", None)
    if shell is None:
        return None
    return shell.desktops.active.id


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log line per request, tagged with the desktop and the shell action."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
        subject, action = describe_shell_request(request.method, request.url.path)
        request.state.correlation_id = correlation_id
        request.state.shell_subject = subject
        request.state.shell_action = action
        start_time = time.time()

        response = await call_next(request)

        process_time = (time.time() - start_time) * 1000
        response.headers["X-Correlation-ID"] = correlation_id
        desktop = _active_desktop(request)
        level = logging.DEBUG if request.url.path.startswith(_QUIET_PREFIXES) else logging.INFO
        what = f"{subject} {action}" if subject else f"{request.method} {request.url.path}"
        logger.log(
            level,
            f"[{desktop or '-'}] {what} -> {response.status_code} "
            f"({process_time:.2f}ms, {correlation_id})",
            extra={
                "correlation_id": correlation_id,
                "desktop": desktop,
                "subject": subject,
                "action": action,
                "status_code": response.status_code,
                "latency_ms": f"{process_time:.2f}",
            },
        )
        return response
