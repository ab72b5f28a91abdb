"""Filesystem storage for artwork images.

Blobs are named ``{hash}.{format}`` inside a single directory and carry no
metadata of their own; the catalog owns everything else.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

from kvasari_stage.models.artwork import ImageFormat

logger = logging.getLogger(__name__)

_COPY_BUFFER_SIZE = 1024 * 1024


class BlobStore:
    """Content-hash named image files under a root directory."""

    def __init__(self, root: Path | str) -> None:
        """Initialise the store, creating ``root`` when missing.

        Args:
            root: Directory holding the image files.
        """
        self.root = Path(root)
        logger.info("initialising images store at %s", self.root)
        self.root.mkdir(mode=0o750, parents=True, exist_ok=True)

    def path_for(self, artwork_id: str, image_format: ImageFormat) -> Path:
        """Return the on-disk path of an artwork image."""
        return self.root / f"{artwork_id}.{image_format.value}"

    def exists(self, artwork_id: str, image_format: ImageFormat) -> bool:
        """Report whether the image file is present."""
        return self.path_for(artwork_id, image_format).is_file()

    def write(self, artwork_id: str, image_format: ImageFormat, source: BinaryIO) -> Path:
        """Copy ``source`` from its start into the blob named after the artwork.

        The bytes land in a temporary sibling first and are moved into place
        with an atomic rename, so readers never observe a partial image.

        Raises:
            OSError: If the file cannot be written, or nothing was written.
        """
        target = self.path_for(artwork_id, image_format)
        source.seek(0)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{artwork_id}.", dir=self.root)
        try:
            with os.fdopen(fd, "wb") as handle:
                shutil.copyfileobj(source, handle, _COPY_BUFFER_SIZE)
                written = handle.tell()
            if written == 0:
                raise OSError(f"no bytes written for {target.name}")
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("stored image %s (%d bytes)", target.name, written)
        return target

    def delete(self, artwork_id: str, image_format: ImageFormat) -> bool:
        """Remove an image file.

        Returns:
            ``True`` when a file was removed, ``False`` when it was already gone.

        Raises:
            OSError: For failures other than the file being absent.
        """
        try:
            self.path_for(artwork_id, image_format).unlink()
        except FileNotFoundError:
            return False
        return True
