"""
Look inside npm packages without installing them.

The package is responsible for:
* Parsing ``name``, ``name@version`` and ``@scope/name@version`` strings.
* Fetching package documents from an npm registry and resolving versions.
* Streaming a tarball through gunzip and decoding the tar entries as text.
* Serving the results over a small read-only HTTP API.
"""
