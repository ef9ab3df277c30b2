"""
Decode an uncompressed ustar archive into text files.

Only the fixed 512-byte header is understood (name at offset 0, octal size
at offset 124). GNU long names and PAX headers are not interpreted; such
members come through as ordinary entries under their raw header name.
"""
from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional

from npm_peek.domain.models import PackageFile, TarHeader

logger = logging.getLogger(__name__)

BLOCK_SIZE = 512
NAME_OFFSET = 0
NAME_LENGTH = 100
SIZE_OFFSET = 124
SIZE_LENGTH = 12
NPM_PACKAGE_PREFIX = "package/"

_OCTAL_RE = re.compile(r"[0-7]+")


def _read_field(block: bytes, start: int, length: int) -> bytes:
    """Bytes of a header field up to its first NUL, or the whole field."""
    field = block[start:start + length]
    nul = field.find(b"\x00")
    return field if nul == -1 else field[:nul]


def _parse_octal(raw: bytes) -> int:
    text = raw.decode("ascii", errors="replace").strip(" \x00")
    if not text:
        return 0
    # int() alone would also take signs, underscores and a "0o" prefix.
    if not _OCTAL_RE.fullmatch(text):
        logger.debug(f"Unparseable tar size field {raw!r}, treating as 0")
        return 0
    return int(text, 8)


def read_tar_header(data: bytes, offset: int) -> Optional[TarHeader]:
    """
    Read the header block at ``offset``.

    Returns None at the end of the archive: an all-zero block, a block with
    an empty name, or fewer than 512 bytes left in ``data``.
    """
    if offset + BLOCK_SIZE > len(data):
        return None

    block = data[offset:offset + BLOCK_SIZE]
    if not any(block):
        return None

    file_name = _read_field(block, NAME_OFFSET, NAME_LENGTH).decode("utf-8", errors="replace")
    if not file_name.strip():
        return None

    file_size = _parse_octal(_read_field(block, SIZE_OFFSET, SIZE_LENGTH))
    return TarHeader(file_name=file_name, file_size=file_size)


def extract_file_content(data: bytes, offset: int, size: int) -> str:
    # Slicing clamps to the end of the buffer for truncated members.
    content = data[offset:offset + size]
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return ""


def strip_package_prefix(file_name: str) -> str:
    if file_name.startswith(NPM_PACKAGE_PREFIX):
        return file_name[len(NPM_PACKAGE_PREFIX):]
    return file_name


def _padded(size: int) -> int:
    return -(-size // BLOCK_SIZE) * BLOCK_SIZE


def iter_tar(data: bytes) -> Iterator[PackageFile]:
    """Yield archive members in order until the end marker or the end of ``data``."""
    offset = 0

    while offset < len(data):
        header = read_tar_header(data, offset)
        if header is None:
            break

        offset += BLOCK_SIZE

        content = extract_file_content(data, offset, header.file_size)
        if header.file_size and not content and offset < len(data):
            logger.debug(f"Tar member {header.file_name} is not valid UTF-8, content dropped")

        # Padding is skipped based on the declared size, even when truncated.
        offset += _padded(header.file_size)

        yield PackageFile(path=strip_package_prefix(header.file_name), content=content)


def decode_tar(data: bytes) -> List[PackageFile]:
    """
    Decode every member of a ustar archive.

    Truncated archives are not an error; whatever was read before the
    truncation point is returned.
    """
    files = list(iter_tar(data))
    logger.debug(f"Decoded {len(files)} files from {len(data)} bytes of tar data")
    return files
