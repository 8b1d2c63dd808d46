"""Sources of the read-only resume projection."""

import asyncio
from abc import ABC, abstractmethod
from urllib.parse import quote

import httpx

from resume_export.config import Settings
from resume_export.errors import (
    ProjectionUnavailableError,
    ResumeNotFoundError,
    UserNotFoundError,
)
from resume_export.models import ResumeExportModel
from resume_export.utils.logging import get_logger

logger = get_logger(__name__)


class ResumeProjectionProvider(ABC):
    """Resolves a user (and optionally a specific resume) to its projection."""

    @abstractmethod
    async def get_projection(
        self, user_id: str, resume_id: str | None = None
    ) -> ResumeExportModel:
        """
        Load the projection to export.

        Raises:
            UserNotFoundError: The user does not exist
            ResumeNotFoundError: The user has no matching resume
        """

    async def close(self) -> None:
        return None


class InMemoryProjectionStore(ResumeProjectionProvider):
    """In-memory projection store for local development and tests."""

    def __init__(self) -> None:
        self._users: set[str] = set()
        self._projections: dict[str, ResumeExportModel] = {}
        self._lock = asyncio.Lock()

    async def add_user(self, user_id: str) -> None:
        """Register a user that has no resume yet."""
        async with self._lock:
            self._users.add(user_id)

    async def add(self, model: ResumeExportModel) -> None:
        """Store a projection under its owner."""
        async with self._lock:
            self._users.add(model.resume.user_id)
            self._projections[model.resume.user_id] = model
            logger.debug("Projection stored", user_id=model.resume.user_id)

    async def get_projection(
        self, user_id: str, resume_id: str | None = None
    ) -> ResumeExportModel:
        if user_id not in self._users:
            raise UserNotFoundError(user_id)

        model = self._projections.get(user_id)
        if model is None or (resume_id is not None and model.resume.id != resume_id):
            raise ResumeNotFoundError(user_id, resume_id)
        return model

    @property
    def count(self) -> int:
        return len(self._projections)


class HttpProjectionProvider(ResumeProjectionProvider):
    """Fetches projections from the persistence service over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpProjectionProvider":
        return cls(settings.projection_base_url, timeout=settings.projection_timeout_seconds)

    async def get_projection(
        self, user_id: str, resume_id: str | None = None
    ) -> ResumeExportModel:
        params = {"resumeId": resume_id} if resume_id else None
        try:
            response = await self._client.get(
                f"/users/{quote(user_id, safe='')}/resume-projection", params=params
            )
        except httpx.TransportError as e:
            logger.error("Projection service unreachable", user_id=user_id, error=str(e))
            raise ProjectionUnavailableError(f"Projection service unreachable: {e}") from e

        if response.status_code == 404:
            missing = _missing_entity(response)
            logger.info("Projection not found", user_id=user_id, missing=missing)
            if missing == "user":
                raise UserNotFoundError(user_id)
            raise ResumeNotFoundError(user_id, resume_id)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Projection service error", user_id=user_id, status_code=response.status_code
            )
            raise ProjectionUnavailableError(
                f"Projection service returned {response.status_code}"
            ) from e

        try:
            return ResumeExportModel.model_validate(response.json())
        except ValueError as e:
            logger.error("Projection service sent an invalid projection", user_id=user_id)
            raise ProjectionUnavailableError("Invalid projection payload") from e

    async def close(self) -> None:
        await self._client.aclose()


def _missing_entity(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "resume"
    if isinstance(body, dict) and body.get("missing") == "user":
        return "user"
    return "resume"
