"""Render target URLs and the allow-list they must pass before navigation."""

import ipaddress
from dataclasses import dataclass
from urllib.parse import quote, urlencode, urlsplit

from resume_export.config import Settings
from resume_export.errors import DisallowedUrlError


@dataclass(frozen=True)
class ValidatedUrl:
    """A URL that passed an allow-list check. Only these reach the engine."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RejectedUrl:
    """A URL that failed the allow-list check."""

    value: str
    reason: str


@dataclass(frozen=True)
class UrlPolicy:
    """Schemes and hosts a URL may use."""

    schemes: frozenset[str]
    hosts: frozenset[str]
    allow_private_addresses: bool = False

    @classmethod
    def for_logos(cls, settings: Settings) -> "UrlPolicy":
        return cls(
            schemes=frozenset(s.lower() for s in settings.logo_allowed_schemes),
            hosts=frozenset(h.lower() for h in settings.logo_allowed_hosts),
        )

    @classmethod
    def for_frontend(cls, settings: Settings) -> "UrlPolicy":
        # The front-end usually runs on a private network next to us
        return cls(
            schemes=frozenset({settings.frontend_scheme.lower()}),
            hosts=frozenset({settings.frontend_host.lower()}),
            allow_private_addresses=True,
        )

    def allows_host(self, host: str) -> bool:
        for allowed in self.hosts:
            if allowed.startswith("*."):
                if host.endswith(allowed[1:]):
                    return True
            elif host == allowed:
                return True
        return False


def check_url(raw: str, policy: UrlPolicy) -> ValidatedUrl | RejectedUrl:
    """Classify a URL against a policy without raising."""
    if any(ord(ch) < 0x20 or ch in " \\" for ch in raw):
        return RejectedUrl(raw, "illegal characters")

    try:
        parts = urlsplit(raw)
        host = (parts.hostname or "").lower()
        _ = parts.port  # raises on an out-of-range port
    except ValueError:
        return RejectedUrl(raw, "malformed URL")

    if parts.scheme.lower() not in policy.schemes:
        return RejectedUrl(raw, f"scheme {parts.scheme or '<none>'!r} not allowed")
    if not host:
        return RejectedUrl(raw, "missing host")
    if parts.username is not None or parts.password is not None:
        return RejectedUrl(raw, "credentials in URL")
    if not policy.allow_private_addresses:
        if host == "localhost" or host.endswith(".localhost"):
            return RejectedUrl(raw, "loopback host")
        try:
            address = ipaddress.ip_address(host)
        except ValueError:
            address = None
        if address is not None and not address.is_global:
            return RejectedUrl(raw, "non-public address")
    if not policy.allows_host(host):
        return RejectedUrl(raw, f"host {host!r} not in allow-list")

    return ValidatedUrl(raw)


def require_url(raw: str, policy: UrlPolicy) -> ValidatedUrl:
    """Validate a URL or raise DisallowedUrlError."""
    result = check_url(raw, policy)
    if isinstance(result, RejectedUrl):
        raise DisallowedUrlError(result.reason)
    return result


class RenderUrlBuilder:
    """Builds front-end export view URLs from style parameters."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._frontend_policy = UrlPolicy.for_frontend(settings)
        self._logo_policy = UrlPolicy.for_logos(settings)

    @property
    def base_url(self) -> str:
        s = self._settings
        return f"{s.frontend_scheme}://{s.frontend_host}:{s.frontend_port}"

    def validate_logo(self, logo_url: str) -> ValidatedUrl:
        return require_url(logo_url, self._logo_policy)

    def resume_url(
        self,
        palette: str,
        language: str,
        banner_color: str | None = None,
        user_id: str | None = None,
    ) -> ValidatedUrl:
        """URL of the resume export view."""
        params: dict[str, str] = {"export": "1", "palette": palette, "lang": language}
        if banner_color:
            params["bannerColor"] = banner_color
        if user_id:
            params["user"] = user_id
        return self._build(self._settings.frontend_resume_path, params)

    def banner_url(self, palette: str, logo_url: str | None = None) -> ValidatedUrl:
        """URL of the banner view; the logo is checked against the allow-list first."""
        params: dict[str, str] = {"export": "1", "palette": palette}
        if logo_url:
            params["logo"] = self.validate_logo(logo_url).value
        return self._build(self._settings.frontend_banner_path, params)

    def _build(self, path: str, params: dict[str, str]) -> ValidatedUrl:
        if not path.startswith("/"):
            path = "/" + path
        url = f"{self.base_url}{path}?{urlencode(params, quote_via=quote, safe='')}"
        return require_url(url, self._frontend_policy)
