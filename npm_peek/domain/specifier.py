import re

from npm_peek.domain.errors import InvalidSpecifier
from npm_peek.domain.models import PackageSpecifier

# (@[^/\s]+/)?  optional scope, e.g. "@scope/"
# ([^@\s]+)     package name, up to "@" or end
# (@(.+))?      optional version after "@", through the end of the string
_SPECIFIER_RE = re.compile(r"(@[^/\s]+/)?([^@\s]+)(@(.+))?")


def parse_specifier(raw: str) -> PackageSpecifier:
    """
    Parse an npm package string into scope, name and version.

    A missing version defaults to ``"latest"``.
    """
    match = _SPECIFIER_RE.fullmatch(raw or "")
    if not match:
        raise InvalidSpecifier(raw)

    scope = match.group(1)[:-1] if match.group(1) else None
    # The scope group stops at the first "/", so "@" inside it would mean
    # something like "@a@b/c" which is not a valid scope.
    if scope is not None and "@" in scope[1:]:
        raise InvalidSpecifier(raw)

    return PackageSpecifier(
        scope=scope,
        name=match.group(2),
        version=match.group(4) or "latest",
    )


def has_explicit_version(raw: str) -> bool:
    """True if ``raw`` carries an ``@version`` suffix after the (optional) scope."""
    body = raw[1:] if raw.startswith("@") else raw
    return "@" in body
