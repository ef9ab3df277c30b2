"""
Fetch package metadata from an npm registry and resolve tarball URLs.
"""
from __future__ import annotations

import json
import logging
from typing import Optional, Union
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from npm_peek.core.config import Settings
from npm_peek.domain.errors import MetadataDecodeError, MetadataFetchError, VersionNotFoundError
from npm_peek.domain.models import PackageMetadata, Registry

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves alone beyond what quote() always keeps.
_URI_COMPONENT_SAFE = "!*'()"


def encode_package_name(package_name: str) -> str:
    """
    Percent-encode a package name for use as a single URL path segment.

    The leading ``@`` of a scoped name stays literal; the rest, including the
    scope separator, is encoded (``@scope/name`` -> ``@scope%2Fname``).
    """
    if package_name.startswith("@"):
        return "@" + quote(package_name[1:], safe=_URI_COMPONENT_SAFE)
    return quote(package_name, safe=_URI_COMPONENT_SAFE)


def build_metadata_url(package_name: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/{encode_package_name(package_name)}"


class RegistryClient:
    """Reads package documents from an npm-compatible registry."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.settings.timeout_seconds,
            transport=self.transport,
        )

    async def fetch_metadata(
        self,
        package_name: str,
        registry: Optional[Union[Registry, str]] = None,
    ) -> PackageMetadata:
        """
        Download the package document for ``package_name``.

        Args:
            package_name: Full registry name, e.g. ``react`` or ``@scope/name``
            registry: Registry preset for this call; the configured default when omitted

        Returns:
            Parsed PackageMetadata
        """
        url = build_metadata_url(package_name, self.settings.registry_url(registry))
        logger.debug(f"Fetching metadata for {package_name} from {url}")

        async with self._client() as client:
            response = await client.get(url)

        if not response.is_success:
            logger.debug(f"Metadata request for {package_name} failed with status {response.status_code}")
            raise MetadataFetchError(response.status_code, url, package_name)

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MetadataDecodeError(url, f"body is not valid JSON ({e})") from e

        if not isinstance(payload, dict):
            raise MetadataDecodeError(url, f"expected a JSON object, got {type(payload).__name__}")

        try:
            metadata = PackageMetadata.model_validate(payload)
        except ValidationError as e:
            raise MetadataDecodeError(url, str(e)) from e

        logger.debug(
            f"Fetched metadata for {package_name}: "
            f"latest={metadata.dist_tags.latest}, versions={len(metadata.versions)}"
        )
        return metadata

    @staticmethod
    def resolve_version(metadata: PackageMetadata, version: Optional[str]) -> str:
        """Map ``None`` / ``"latest"`` to the ``dist-tags.latest`` version."""
        if not version or version == "latest":
            return metadata.dist_tags.latest
        return version

    @staticmethod
    def resolve_tarball_url(metadata: PackageMetadata, version: Optional[str]) -> str:
        resolved = RegistryClient.resolve_version(metadata, version)
        record = metadata.versions.get(resolved)
        tarball_url = record.tarball if record else None
        if not tarball_url:
            package_name = metadata.name or (record.name if record else None)
            raise VersionNotFoundError(resolved, package_name)
        return tarball_url
