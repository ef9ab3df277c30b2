from typing import Optional

from npm_peek.core.config import Settings, load_settings
from npm_peek.services.package_service import PackageService

_settings: Optional[Settings] = None
_package_service: Optional[PackageService] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def get_package_service() -> PackageService:
    global _package_service
    if _package_service is None:
        _package_service = PackageService(get_settings())
    return _package_service
