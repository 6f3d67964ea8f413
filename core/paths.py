"""Inbound path to upstream path resolution."""

import re

_SLASH_RUN = re.compile(r"/+")


def resolve_path(full_path: str, route_prefix: str) -> str:
    """Strip everything through the first ``route_prefix`` and normalize slashes.

    Returns ``"/"`` when the prefix does not occur in ``full_path``.
    """
    index = full_path.find(route_prefix)
    if index == -1:
        return "/"
    remainder = full_path[index + len(route_prefix):]
    return _SLASH_RUN.sub("/", "/" + remainder)
