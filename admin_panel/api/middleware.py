"""Starlette middleware running the edge route guard on every page request."""

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from admin_panel.engine.guard import EdgeRouteGuard
from admin_panel.utils.constants import AUTH_TOKEN_COOKIE
from admin_panel.utils.cookies import clear_auth_cookies


class RouteGuardMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, guard: EdgeRouteGuard):
        super().__init__(app)
        self.guard = guard

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        cookies = request.cookies

        # Signed tokens decode in-process; only legacy tokens touch the database
        if self.guard.needs_lookup(cookies.get(AUTH_TOKEN_COOKIE)):
            decision = await run_in_threadpool(self.guard.evaluate, path, cookies)
        else:
            decision = self.guard.evaluate(path, cookies)

        if decision.allowed:
            return await call_next(request)

        response = RedirectResponse(url=decision.location, status_code=307)
        if decision.clear_session:
            clear_auth_cookies(response)
        return response
