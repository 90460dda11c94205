from enum import Enum
from os import PathLike
from typing import Union

# Complete path type including strings and any path-like object
PathType = Union[str, PathLike[str]]


class NodeKind(Enum):
    """Enumeration of node kinds in a structure tree.

    The kind of a node is only known when the structure text carries type
    markers (``f::`` or ``d::``). Nodes parsed from unmarked segments are
    UNSPECIFIED; the synthetic root of a decoded tree is always a DIRECTORY.

    Attributes:
        FILE: Regular file (``f::`` marker)
        DIRECTORY: Directory (``d::`` marker)
        UNSPECIFIED: No marker was present
    """

    FILE = "file"
    DIRECTORY = "directory"
    UNSPECIFIED = "unspecified"
