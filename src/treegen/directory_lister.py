"""Directory listing collaborators used when scanning a hierarchy.

The structure codec never touches the filesystem itself: it asks a
DirectoryLister for the entries of each directory it visits. FileSystemLister is
the default, backed by ``os.scandir``; tests and callers describing logical
hierarchies can provide any object with a compatible ``list_dir`` method.
"""

import logging
import os
from pathlib import Path
from typing import List, NamedTuple, Protocol, Sequence

from treegen.types import PathType

logger = logging.getLogger(__name__)


class DirectoryEntry(NamedTuple):
    """One entry returned by a directory lister."""

    name: str
    is_dir: bool


class DirectoryLister(Protocol):
    """Anything able to list the entries of a directory path."""

    def list_dir(self, path: PathType) -> Sequence[DirectoryEntry]:
        """Return the entries of ``path`` in the order they should be encoded.

        Raises:
            OSError: If the directory cannot be read. Errors are propagated to the
                caller unchanged.
        """
        ...


class FileSystemLister:
    """Directory lister reading the real filesystem.

    Attributes:
        sort (bool): Return entries sorted by name. When False, the order is whatever
            the operating system reports, which varies between platforms and
            filesystems.
        follow_symlinks (bool): Report symlinks to directories as directories, so
            they are descended into. Symlink loops are not detected.

    Example:
        >>> import tempfile
        >>> from pathlib import Path
        >>> with tempfile.TemporaryDirectory() as tmpdir:
        ...     (Path(tmpdir) / "b.txt").touch()
        ...     (Path(tmpdir) / "a").mkdir()
        ...     FileSystemLister().list_dir(tmpdir)
        [DirectoryEntry(name='a', is_dir=True), DirectoryEntry(name='b.txt', is_dir=False)]
    """

    def __init__(self, sort: bool = True, follow_symlinks: bool = True) -> None:
        self.sort = sort
        self.follow_symlinks = follow_symlinks

    def list_dir(self, path: PathType) -> List[DirectoryEntry]:
        """List the entries of a directory.

        Args:
            path: The directory to list.

        Returns:
            List of entries, sorted by name unless ``sort`` is False.

        Raises:
            FileNotFoundError: If the path does not exist.
            NotADirectoryError: If the path is not a directory.
            PermissionError: If the directory cannot be read.
        """
        with os.scandir(Path(path)) as it:
            entries = [DirectoryEntry(entry.name, entry.is_dir(follow_symlinks=self.follow_symlinks)) for entry in it]

        if self.sort:
            entries.sort(key=lambda entry: entry.name)

        logger.debug("Listed %d entries in %s", len(entries), path)
        return entries
