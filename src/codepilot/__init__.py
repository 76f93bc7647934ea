# codepilot: natural-language routing to provider MCP tools
# Package initialization and server entry point

__version__ = "0.1.0"

DEFAULT_PORT = 8010


def _is_port_in_use(host: str, port: int) -> bool:
    import socket
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.settimeout(0.5)
        return s.connect_ex((host, port)) == 0


def _find_available_port(host: str, start_port: int, tries: int = 10) -> int | None:
    for port in range(start_port, start_port + max(1, tries)):
        if not _is_port_in_use(host, port):
            return port
    return None


def run_server() -> None:
    """Server entry point (with dynamic port fallback)."""
    import os
    import uvicorn

    from .config import get_config

    settings = get_config()
    host = settings.host
    connect_host = "127.0.0.1" if host in ("0.0.0.0", "") else host

    if os.getenv("PORT") is not None:
        # Respect an explicit PORT (no auto-fallback)
        port = settings.port
        if _is_port_in_use(connect_host, port):
            raise SystemExit(f"PORT {port} is already in use and was explicitly set. Aborting.")
    else:
        port = settings.port
        if _is_port_in_use(connect_host, port):
            fallback = _find_available_port(connect_host, port, tries=10)
            if fallback is None:
                raise SystemExit(f"No available port found near {port}. Aborting.")
            port = fallback

    uvicorn.run("codepilot.main:app", host=host, port=port, reload=False)
