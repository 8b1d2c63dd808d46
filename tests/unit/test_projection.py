"""Tests for resume projection providers."""

import httpx
import pytest

from resume_export.errors import (
    ProjectionUnavailableError,
    ResumeNotFoundError,
    UserNotFoundError,
)
from resume_export.projection import HttpProjectionProvider, InMemoryProjectionStore
from tests.fakes import build_projection


@pytest.mark.asyncio
async def test_in_memory_store_lookup() -> None:
    store = InMemoryProjectionStore()
    model = build_projection()
    await store.add(model)

    assert await store.get_projection("user-1") == model
    assert await store.get_projection("user-1", "resume-1") == model
    assert store.count == 1


@pytest.mark.asyncio
async def test_in_memory_store_missing_user() -> None:
    store = InMemoryProjectionStore()

    with pytest.raises(UserNotFoundError):
        await store.get_projection("ghost")


@pytest.mark.asyncio
async def test_in_memory_store_user_without_resume() -> None:
    """Test a known user without a resume is distinguished from an unknown user."""
    store = InMemoryProjectionStore()
    await store.add_user("user-9")

    with pytest.raises(ResumeNotFoundError):
        await store.get_projection("user-9")


@pytest.mark.asyncio
async def test_in_memory_store_wrong_resume_id() -> None:
    store = InMemoryProjectionStore()
    await store.add(build_projection())

    with pytest.raises(ResumeNotFoundError):
        await store.get_projection("user-1", "resume-404")


def http_provider(handler) -> HttpProjectionProvider:
    client = httpx.AsyncClient(
        base_url="http://persistence.internal/internal",
        transport=httpx.MockTransport(handler),
    )
    return HttpProjectionProvider("http://persistence.internal/internal", client=client)


@pytest.mark.asyncio
async def test_http_provider_fetches_projection() -> None:
    model = build_projection()
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=model.model_dump(mode="json", by_alias=True))

    provider = http_provider(handler)
    try:
        result = await provider.get_projection("user/1")
    finally:
        await provider.close()

    assert result == model
    assert seen[0].url.raw_path == b"/internal/users/user%2F1/resume-projection"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "error"),
    [
        ({"missing": "user"}, UserNotFoundError),
        ({"missing": "resume"}, ResumeNotFoundError),
        ({}, ResumeNotFoundError),
    ],
)
async def test_http_provider_not_found(body: dict[str, str], error: type[Exception]) -> None:
    provider = http_provider(lambda request: httpx.Response(404, json=body))
    try:
        with pytest.raises(error):
            await provider.get_projection("user-1")
    finally:
        await provider.close()


@pytest.mark.asyncio
async def test_http_provider_server_error() -> None:
    provider = http_provider(lambda request: httpx.Response(502))
    try:
        with pytest.raises(ProjectionUnavailableError) as exc_info:
            await provider.get_projection("user-1")
    finally:
        await provider.close()

    assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_http_provider_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = http_provider(handler)
    try:
        with pytest.raises(ProjectionUnavailableError):
            await provider.get_projection("user-1")
    finally:
        await provider.close()


@pytest.mark.asyncio
async def test_http_provider_invalid_payload() -> None:
    provider = http_provider(lambda request: httpx.Response(200, json={"resume": None}))
    try:
        with pytest.raises(ProjectionUnavailableError):
            await provider.get_projection("user-1")
    finally:
        await provider.close()
