"""
Entry points used by package viewers: metadata lookup and file listing.

Callers depend on PackageService only; the registry client, retriever and
tar decoder behind it are not part of the public surface.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

import httpx

from npm_peek.core.config import Settings, coerce_registry
from npm_peek.domain.models import PackageFile, PackageMetadata, PackageSummary, Registry
from npm_peek.domain.specifier import has_explicit_version, parse_specifier
from npm_peek.services.archive_retriever import ArchiveRetriever
from npm_peek.services.registry_client import RegistryClient
from npm_peek.services.tar_decoder import decode_tar

logger = logging.getLogger(__name__)

RegistryOverride = Optional[Union[Registry, str]]


def _author_name(author: Any) -> str:
    if isinstance(author, str):
        return author
    if isinstance(author, dict):
        return str(author.get("name") or "")
    return ""


class PackageService:
    """Resolve, download and decode npm packages."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.registry_client = RegistryClient(settings, transport=transport)
        self.archive_retriever = ArchiveRetriever(settings, transport=transport)

    def _registry(self, registry: RegistryOverride) -> Registry:
        if registry is None:
            return self.settings.default_registry
        return coerce_registry(registry)

    async def get_package_metadata(
        self,
        specifier_or_name: str,
        registry: RegistryOverride = None,
    ) -> PackageMetadata:
        """
        Fetch the registry document for a package.

        A bare name (``react``, ``@scope/name``) is used as given; a string
        with a version suffix is parsed and only its name is looked up.
        """
        selected = self._registry(registry)
        if has_explicit_version(specifier_or_name):
            package_name = parse_specifier(specifier_or_name).full_name
        else:
            if not specifier_or_name:
                # Reject empty names the same way the parser would.
                parse_specifier(specifier_or_name)
            package_name = specifier_or_name

        return await self.registry_client.fetch_metadata(package_name, selected)

    async def get_package_files(
        self,
        specifier: str,
        registry: RegistryOverride = None,
    ) -> List[PackageFile]:
        """
        Download ``specifier`` (``name[@version]``) and return its files.

        Paths are relative to the package root, without npm's ``package/``
        directory. Content is decoded as UTF-8; members that are not valid
        UTF-8 come back with empty content.
        """
        selected = self._registry(registry)
        parsed = parse_specifier(specifier)
        logger.info(f"Fetching files for {parsed.full_name}@{parsed.version} from {selected.value}")

        metadata = await self.registry_client.fetch_metadata(parsed.full_name, selected)
        tarball_url = self.registry_client.resolve_tarball_url(metadata, parsed.version)
        tar_data = await self.archive_retriever.fetch_and_decompress(tarball_url)
        files = decode_tar(tar_data)

        logger.info(f"Decoded {len(files)} files for {parsed.full_name}@{parsed.version}")
        return files

    async def get_package_summary(
        self,
        specifier: str,
        registry: RegistryOverride = None,
    ) -> PackageSummary:
        """Name, version, description, author and README for one resolved version."""
        parsed = parse_specifier(specifier)
        metadata = await self.registry_client.fetch_metadata(parsed.full_name, self._registry(registry))
        version = self.registry_client.resolve_version(metadata, parsed.version)

        # Fail the same way file listing would for an unknown version.
        self.registry_client.resolve_tarball_url(metadata, version)
        record = metadata.versions[version]

        return PackageSummary(
            name=record.name or metadata.name or parsed.full_name,
            version=record.version or version,
            description=record.description or "",
            author=_author_name(record.author),
            readme=record.readme or "",
        )


if __name__ == "__main__":
    import asyncio
    import sys

    from npm_peek.core.config import load_settings
    from npm_peek.domain.errors import PackagePeekError

    if len(sys.argv) < 2:
        print("Usage: python -m npm_peek.services.package_service <package[@version]> [registry]")
        sys.exit(2)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        service = PackageService(load_settings())
        package_files = asyncio.run(
            service.get_package_files(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
        )
    except (PackagePeekError, ValueError) as e:
        print(f"\nError: {e}")
        sys.exit(1)

    for package_file in package_files:
        print(f"{len(package_file.content):>10}  {package_file.path}")
