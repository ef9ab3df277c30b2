"""
Network and archive handling: registry lookups, tarball download and
decompression, tar decoding, and the PackageService facade over them.
"""
