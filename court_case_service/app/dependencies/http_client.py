from fastapi import Request
import httpx


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """Returns the shared httpx.AsyncClient created at application startup."""
    http_client = getattr(request.app.state, "http_client", None)
    if http_client is None:
        raise RuntimeError("HTTP client not initialized; application startup has not run.")
    return http_client
