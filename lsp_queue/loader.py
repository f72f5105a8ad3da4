"""
Filesystem resource loader.

Reads the source text or package bytes a job needs when the client did not
send them inline.
"""

import base64
import logging
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from lsp_queue.config import get_settings
from lsp_queue.errors import ResourceLoadError

logger = logging.getLogger(__name__)


def uri_to_path(uri: str) -> Path:
    """
    Convert a ``file://`` URI (or a plain path) to a filesystem path.

    Raises:
        ResourceLoadError: If the URI uses another scheme or names a remote
            host.
    """
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        if parsed.netloc not in ("", "localhost"):
            raise ResourceLoadError(uri, f"remote host '{parsed.netloc}' is not supported")
        return Path(url2pathname(parsed.path))
    # Single letters are Windows drive letters, not schemes
    if parsed.scheme == "" or len(parsed.scheme) == 1:
        return Path(uri)
    raise ResourceLoadError(uri, f"unsupported URI scheme '{parsed.scheme}'")


class FileResourceLoader:
    """Reads resources from the local filesystem."""

    def __init__(self, encoding: str | None = None):
        self.encoding = encoding or get_settings().source_encoding

    def read_text(self, uri: str) -> str:
        """
        Read a source file.

        Args:
            uri: The file URI.

        Returns:
            The decoded file contents.

        Raises:
            ResourceLoadError: If the file cannot be read or decoded.
        """
        path = uri_to_path(uri)
        try:
            return path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceLoadError(uri, e) from e

    def read_binary_as_base64(self, uri: str) -> str:
        """
        Read a package file and encode it for the wire.

        Raises:
            ResourceLoadError: If the file cannot be read.
        """
        path = uri_to_path(uri)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ResourceLoadError(uri, e) from e
        logger.debug("Loaded package", extra={"uri": uri, "size": len(data)})
        return base64.b64encode(data).decode("ascii")
