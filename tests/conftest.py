"""Shared fixtures: synthetic tarballs, registry documents and a fake registry."""
from __future__ import annotations

import gzip
import io
import json
import tarfile
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from npm_peek.core.config import Settings

NPM_URL = "https://registry.npmjs.org"
BLUE_URL = "http://npm.m2.blue.cdtapps.com"


def tar_header(name: bytes, size_field: bytes) -> bytes:
    """A 512-byte header block with only the name and size fields set."""
    block = bytearray(512)
    block[0:len(name)] = name
    block[124:124 + len(size_field)] = size_field
    return bytes(block)


def tar_member(name: str, content: bytes) -> bytes:
    header = tar_header(name.encode("utf-8"), b"%011o\x00" % len(content))
    padding = (-len(content)) % 512
    return header + content + b"\x00" * padding


def build_tar(entries: List[Tuple[str, bytes]]) -> bytes:
    """Uncompressed ustar archive written by the standard library."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=tarfile.USTAR_FORMAT) as tar:
        for name, content in entries:
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def build_tgz(entries: List[Tuple[str, bytes]]) -> bytes:
    return gzip.compress(build_tar(entries))


def registry_document(
    name: str = "demo",
    tarballs: Optional[Dict[str, Optional[str]]] = None,
    latest: str = "1.0.0",
) -> dict:
    if tarballs is None:
        tarballs = {"1.0.0": f"{NPM_URL}/{name}/-/{name}-1.0.0.tgz"}
    versions = {}
    for version, tarball in tarballs.items():
        record = {"name": name, "version": version, "description": f"{name} {version}"}
        if tarball is not None:
            record["dist"] = {"tarball": tarball}
        versions[version] = record
    return {"name": name, "dist-tags": {"latest": latest}, "versions": versions}


class FakeRegistry:
    """Serves registry documents and tarballs by absolute URL, records requests."""

    def __init__(self) -> None:
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add_json(self, url: str, payload: dict, status_code: int = 200) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.routes[url] = lambda request: httpx.Response(status_code, content=body)

    def add_bytes(self, url: str, content: bytes, status_code: int = 200) -> None:
        # Served as an unread stream, the way a real transport delivers it,
        # so the retriever can consume it with aiter_raw().
        async def _body():
            if content:
                yield content

        self.routes[url] = lambda request: httpx.Response(status_code, content=_body())

    def add_response(self, url: str, factory: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[url] = factory

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url in self.routes:
            return self.routes[url](request)
        return httpx.Response(404, content=b'{"error":"Not found"}')

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()
