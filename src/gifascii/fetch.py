"""Download remote animations to a local temporary file."""

import logging
import os
import tempfile
from urllib.parse import urlparse

import requests

from gifascii.errors import FetchError

logger = logging.getLogger(__name__)

USER_AGENT = "gifascii/0.1"
TIMEOUT_SECONDS = 30
IMAGE_EXTENSIONS = ('gif', 'png', 'jpg', 'jpeg', 'webp')


def is_url(value):
    return value.startswith("http://") or value.startswith("https://")


def extension_from_url(url):
    path = urlparse(url).path
    last_segment = path.rsplit('/', 1)[-1]
    if '.' not in last_segment:
        return None
    extension = last_segment.rsplit('.', 1)[-1].lower()
    return extension if extension in IMAGE_EXTENSIONS else None


def download(url, timeout=TIMEOUT_SECONDS):
    """Fetch ``url`` and return the path of a temporary file holding it.

    The caller owns the file and should remove it when done.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        raise FetchError(f"Only HTTP and HTTPS URLs are supported, got {url!r}")
    try:
        response = requests.get(url, timeout=timeout, headers={'User-Agent': USER_AGENT})
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Failed to download {url}: {e}") from e

    content_type = response.headers.get('content-type', '')
    if content_type and not content_type.startswith('image/'):
        logger.warning("Content-Type is %r, which may not be an image", content_type)

    suffix = '.' + (extension_from_url(url) or 'gif')
    fd, path = tempfile.mkstemp(suffix=suffix, prefix='gifascii-')
    with os.fdopen(fd, 'wb') as f:
        f.write(response.content)
    logger.info("Downloaded %d bytes from %s to %s", len(response.content), url, path)
    return path
