import httpx
import pytest
from jayrpc.demo import build_server


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def server():
    """Demo server with its procedures and middleware registered."""
    return build_server()


@pytest.fixture
async def client(server):
    """In-process async test client."""
    transport = httpx.ASGITransport(app=server.app)  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
