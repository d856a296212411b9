from dataclasses import dataclass
from typing import Mapping, Optional, Union

from .cache import CacheEntry
from .errors import UnexpectedStatusError


@dataclass(frozen=True)
class Fresh:
    body: bytes
    etag: Optional[str] = None


@dataclass(frozen=True)
class Cached:
    body: bytes
    etag: Optional[str] = None


@dataclass(frozen=True)
class Failed:
    error: BaseException


Outcome = Union[Fresh, Cached, Failed]


def header_value(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    if not headers:
        return None
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, val in headers.items():
        if key.lower() == lowered:
            return val
    return None


def classify_response(
    status: int,
    headers: Optional[Mapping[str, str]],
    body: Optional[bytes],
    cached: Optional[CacheEntry],
) -> Outcome:
    if status == 200:
        return Fresh(body=body or b"", etag=header_value(headers, "ETag"))
    if status == 304:
        # the body of a 304 is whatever we revalidated against
        if cached is not None:
            return Cached(body=cached.body, etag=cached.etag)
        return Cached(body=body or b"")
    return Failed(UnexpectedStatusError(status))
