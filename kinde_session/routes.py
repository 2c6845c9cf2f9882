"""
FastAPI routes for hosts that handle the issuer redirect server-side.
GET /callback exchanges the code (state/verifier must already be in the active store);
POST /refresh rotates tokens on demand.
"""
import html

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from kinde_session.exchange import exchange_authorization_code
from kinde_session.refresh import refresh_token
from kinde_session.refresh_timer import RefreshTimer
from kinde_session.registry import StorageRegistry


def _error_page(title: str, message: str, status_code: int = 400) -> HTMLResponse:
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{html.escape(title)}</title></head>
<body>
  <h1>{html.escape(title)}</h1>
  <p>{html.escape(message)}</p>
  <p><a href="/">Home</a></p>
</body>
</html>""",
        status_code=status_code,
    )


def create_auth_router(
    *,
    domain: str,
    client_id: str,
    redirect_url: str,
    success_url: str = "/",
    auto_refresh: bool = True,
    registry: StorageRegistry | None = None,
    timer: RefreshTimer | None = None,
) -> APIRouter:
    router = APIRouter(tags=["auth"])

    @router.get("/callback", response_class=HTMLResponse)
    async def callback(request: Request):
        """Handle redirect from the issuer (?code=...&state=... or ?error=...)."""
        params = request.query_params
        error = params.get("error")
        if error:
            return _error_page("Login error", params.get("error_description") or error)

        result = await exchange_authorization_code(
            params,
            domain=domain,
            client_id=client_id,
            redirect_url=redirect_url,
            auto_refresh=auto_refresh,
            registry=registry,
            timer=timer,
        )
        if not result.success:
            return _error_page("Token exchange failed", result.error or "Unknown error")
        return RedirectResponse(url=success_url, status_code=302)

    @router.post("/refresh")
    async def refresh():
        result = await refresh_token(domain, client_id, registry=registry, timer=timer)
        return JSONResponse(
            {"success": result.success, "error": result.error},
            status_code=200 if result.success else 401,
        )

    return router
