"""
Download a package tarball and gunzip it while it streams in.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

try:
    import zlib
except ImportError:  # interpreters built without zlib
    zlib = None

from npm_peek.core.config import Settings
from npm_peek.domain.errors import (
    ArchiveDecompressError,
    ArchiveTooLarge,
    DecompressionUnsupported,
    EmptyBody,
    TarballFetchError,
)

logger = logging.getLogger(__name__)


def _new_gzip_decompressor():
    if zlib is None:
        raise DecompressionUnsupported()
    # 16 + MAX_WBITS: expect a gzip header and trailer around the DEFLATE data
    return zlib.decompressobj(16 + zlib.MAX_WBITS)


class ArchiveRetriever:
    """Fetches ``.tgz`` archives and returns the decompressed tar bytes."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    async def fetch_and_decompress(self, tarball_url: str) -> bytes:
        """
        Download ``tarball_url`` and gunzip it chunk by chunk.

        The compressed payload is never held in memory as a whole; each
        network chunk is fed to the decompressor as soon as it arrives and
        the output is appended, in order, to a single buffer.

        Returns:
            The decompressed tar archive
        """
        decompressor = _new_gzip_decompressor()
        limit = self.settings.max_archive_bytes

        logger.debug(f"Downloading tarball from {tarball_url}")
        decompressed = bytearray()
        compressed_size = 0
        chunk_count = 0

        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.settings.timeout_seconds,
            transport=self.transport,
        ) as client:
            async with client.stream("GET", tarball_url) as response:
                if not response.is_success:
                    raise TarballFetchError(response.status_code, tarball_url)

                # aiter_raw: the .tgz must reach the decompressor as sent,
                # even if the server also labels it with a Content-Encoding.
                async for chunk in response.aiter_raw():
                    if not chunk:
                        continue
                    compressed_size += len(chunk)
                    chunk_count += 1
                    try:
                        decompressed.extend(decompressor.decompress(chunk))
                    except zlib.error as e:
                        logger.error(f"Failed to decompress chunk {chunk_count} of {tarball_url}: {e}", exc_info=True)
                        raise ArchiveDecompressError(tarball_url, str(e)) from e
                    if limit is not None and len(decompressed) > limit:
                        raise ArchiveTooLarge(limit)

        if compressed_size == 0:
            raise EmptyBody(tarball_url)

        try:
            decompressed.extend(decompressor.flush())
        except zlib.error as e:
            raise ArchiveDecompressError(tarball_url, str(e)) from e

        if limit is not None and len(decompressed) > limit:
            raise ArchiveTooLarge(limit)

        if not decompressor.eof:
            logger.warning(f"Tarball from {tarball_url} ended before the end of the gzip stream")

        logger.debug(
            f"Decompressed tarball from {tarball_url}: {chunk_count} chunks, "
            f"compressed={compressed_size} bytes, decompressed={len(decompressed)} bytes"
        )
        return bytes(decompressed)
