"""
Exception hierarchy for the registry → tarball → file list pipeline.

Every failure the pipeline surfaces derives from ``PackagePeekError`` and
carries a short machine-readable ``code`` next to its message. All of them
are terminal for the call that raised them; nothing here is retried.
"""
from __future__ import annotations

from typing import Optional


class PackagePeekError(Exception):
    """Base exception for all pipeline errors."""

    code = "PACKAGE_PEEK_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class InvalidSpecifier(PackagePeekError):
    code = "INVALID_SPECIFIER"

    def __init__(self, raw: str):
        super().__init__(f"Invalid npm package string: {raw!r}")
        self.raw = raw


class UnknownRegistry(PackagePeekError):
    code = "UNKNOWN_REGISTRY"

    def __init__(self, registry: str):
        super().__init__(f"Unknown registry: {registry!r}")
        self.registry = registry


class MetadataFetchError(PackagePeekError):
    code = "METADATA_FETCH_FAILED"

    def __init__(self, status: int, url: str, package_name: Optional[str] = None):
        super().__init__(
            f"Failed to fetch metadata for {package_name or url} (Status: {status})\n"
            f"URL: {url}"
        )
        self.status = status
        self.url = url
        self.package_name = package_name


class MetadataDecodeError(PackagePeekError):
    code = "METADATA_DECODE_FAILED"

    def __init__(self, url: str, reason: str):
        super().__init__(f"Malformed metadata from {url}: {reason}")
        self.url = url
        self.reason = reason


class VersionNotFoundError(PackagePeekError):
    code = "VERSION_NOT_FOUND"

    def __init__(self, version: str, package_name: Optional[str] = None):
        super().__init__(f"Version {version} not found for package {package_name}")
        self.version = version
        self.package_name = package_name


class TarballFetchError(PackagePeekError):
    code = "TARBALL_FETCH_FAILED"

    def __init__(self, status: int, url: str):
        super().__init__(f"Failed to fetch tarball from {url} (Status: {status})")
        self.status = status
        self.url = url


class EmptyBody(PackagePeekError):
    code = "EMPTY_BODY"

    def __init__(self, url: str):
        super().__init__(f"Tarball response body from {url} is empty")
        self.url = url


class DecompressionUnsupported(PackagePeekError):
    code = "DECOMPRESSION_UNSUPPORTED"

    def __init__(self) -> None:
        super().__init__("Streaming gzip decompression is not supported in this environment")


class ArchiveDecompressError(PackagePeekError):
    code = "ARCHIVE_DECOMPRESS_FAILED"

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to decompress tarball from {url}: {reason}")
        self.url = url
        self.reason = reason


class ArchiveTooLarge(PackagePeekError):
    code = "ARCHIVE_TOO_LARGE"

    def __init__(self, limit: int):
        super().__init__(f"Decompressed archive exceeds configured limit of {limit} bytes")
        self.limit = limit
