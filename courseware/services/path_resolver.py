"""Map stored public object URLs back to (bucket, path).

The storage service publishes objects at

    <base>/storage/v1/object/public/<bucket>/<percent-encoded path>

and that URL is what gets stored on Video.video_url and
Course.thumbnail_url.  Deleting the object needs the path again.  Many
stored URLs legitimately point elsewhere (YouTube, a CDN, nothing at all),
so "not ours" is a None result, never an error.
"""

from __future__ import annotations

from urllib.parse import quote, unquote, urlsplit

PUBLIC_OBJECT_MARKER = "/storage/v1/object/public/"


def resolve_object_path(public_url: str | None, expected_bucket: str) -> str | None:
    """Return the object path inside expected_bucket, or None.

    None means "nothing of ours to delete": empty input, a malformed or
    non-http(s) URL, a URL without the public-object marker, a different
    bucket, or no path after the bucket.
    """
    if not public_url or not expected_bucket:
        return None
    try:
        parts = urlsplit(public_url.strip())
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None

    idx = parts.path.find(PUBLIC_OBJECT_MARKER)
    if idx == -1:
        return None
    bucket, sep, raw_path = parts.path[idx + len(PUBLIC_OBJECT_MARKER) :].partition(
        "/"
    )
    if not sep or unquote(bucket) != expected_bucket or not raw_path:
        return None
    return unquote(raw_path)


def public_object_url(base_url: str, bucket: str, path: str) -> str:
    """Build the canonical public URL for an object; inverse of resolve_object_path."""
    encoded = "/".join(quote(segment, safe="") for segment in path.split("/"))
    return f"{base_url.rstrip('/')}{PUBLIC_OBJECT_MARKER}{quote(bucket, safe='')}/{encoded}"
