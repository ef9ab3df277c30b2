"""
Read-only package endpoints consumed by package viewers.

Each endpoint is a thin wrapper over one PackageService operation. Pipeline
errors are mapped to HTTP statuses here; the response body carries the
error code and message under ``detail``.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from npm_peek.core.dependencies import get_package_service
from npm_peek.domain.errors import (
    DecompressionUnsupported,
    InvalidSpecifier,
    MetadataFetchError,
    PackagePeekError,
    UnknownRegistry,
    VersionNotFoundError,
)
from npm_peek.domain.models import PackageFile, PackageSummary
from npm_peek.services.package_service import PackageService

logger = logging.getLogger(__name__)
router = APIRouter()


class PackageFilesResponse(BaseModel):
    """File listing for one package version."""

    files: List[PackageFile] = Field(
        default_factory=list,
        description="Archive members in archive order, paths relative to the package root.",
    )


def _status_for(error: PackagePeekError) -> int:
    if isinstance(error, (InvalidSpecifier, UnknownRegistry)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, VersionNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, MetadataFetchError) and error.status == status.HTTP_404_NOT_FOUND:
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, DecompressionUnsupported):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    # Everything else is an upstream registry or archive problem.
    return status.HTTP_502_BAD_GATEWAY


def _http_error(error: PackagePeekError) -> HTTPException:
    code = _status_for(error)
    if code >= 500:
        logger.error(f"{error.code}: {error.message}")
    else:
        logger.info(f"{error.code}: {error.message}")
    return HTTPException(status_code=code, detail=error.to_detail())


# ---------------------------------------------------------------------------
# GET /packages/metadata
# ---------------------------------------------------------------------------

@router.get("/metadata")
async def get_metadata(
    package: str = Query(..., description="Package name, optionally with @version."),
    registry: Optional[str] = Query(None, description="Registry preset: 'npm' or 'blue'."),
    service: PackageService = Depends(get_package_service),
) -> dict:
    """
    Registry document for a package, with the ``dist-tags`` key preserved.
    """
    try:
        metadata = await service.get_package_metadata(package, registry)
    except PackagePeekError as e:
        raise _http_error(e)
    return metadata.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# GET /packages/files
# ---------------------------------------------------------------------------

@router.get("/files", response_model=PackageFilesResponse)
async def get_files(
    package: str = Query(..., description="Package specifier, e.g. 'react@18.2.0'."),
    registry: Optional[str] = Query(None, description="Registry preset: 'npm' or 'blue'."),
    service: PackageService = Depends(get_package_service),
) -> PackageFilesResponse:
    try:
        files = await service.get_package_files(package, registry)
    except PackagePeekError as e:
        raise _http_error(e)
    return PackageFilesResponse(files=files)


# ---------------------------------------------------------------------------
# GET /packages/summary
# ---------------------------------------------------------------------------

@router.get("/summary", response_model=PackageSummary)
async def get_summary(
    package: str = Query(..., description="Package specifier, e.g. '@scope/name@1.0.0'."),
    registry: Optional[str] = Query(None, description="Registry preset: 'npm' or 'blue'."),
    service: PackageService = Depends(get_package_service),
) -> PackageSummary:
    """
    Card fields for one version: name, version, description, author and README.
    """
    try:
        return await service.get_package_summary(package, registry)
    except PackagePeekError as e:
        raise _http_error(e)
