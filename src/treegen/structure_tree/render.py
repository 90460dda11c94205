"""Rendering of structure trees as indented text listings.

Rendering is a pure function of the tree and the options: nodes never store
rendered text, and the per-level state lives in an immutable RenderContext that
is extended, not mutated, on the way down.
"""

from dataclasses import dataclass, field, replace
from typing import Iterator, Optional

from treegen.types import NodeKind

from .structure_node import StructureNode


@dataclass(frozen=True)
class RenderOptions:
    """Formatting parameters for a rendered tree.

    Attributes:
        indent_character: Character repeated ``tabs`` times in front of each entry.
        tabs: Width of one indentation level.
        tree_character: Branch character drawn at the start of each level.
        use_tree_character: Whether the branch character is drawn.
        in_dir_character: Suffix appended to directory names.
        use_in_dir_character: Whether directory names get the suffix. Only nodes whose
            kind is DIRECTORY are suffixed, so without type markers only the root is.
    """

    indent_character: str = "-"
    tabs: int = 4
    tree_character: str = "|"
    use_tree_character: bool = True
    in_dir_character: str = "/"
    use_in_dir_character: bool = True

    def __post_init__(self) -> None:
        if self.tabs < 0:
            raise ValueError(f"tabs must be zero or positive, got {self.tabs}")

    @property
    def branch(self) -> str:
        return self.tree_character if self.use_tree_character else ""


@dataclass(frozen=True)
class RenderContext:
    """Position of a node in the walk: its depth and the indent inherited from its ancestors."""

    options: RenderOptions = field(default_factory=RenderOptions)
    level: int = 0
    indent: str = ""

    def line_prefix(self) -> str:
        """Prefix printed in front of the node name at this position."""
        if self.level == 0:
            return ""
        return self.indent + self.options.branch + self.options.indent_character * self.options.tabs

    def descend(self) -> "RenderContext":
        """Context for the children of a node rendered at this position.

        Only the line directly under a parent carries the indent characters; deeper
        levels inherit blank padding of the same width.
        """
        if self.level == 0:
            indent = ""
        else:
            indent = self.indent + self.options.branch + " " * self.options.tabs
        return replace(self, level=self.level + 1, indent=indent)


def stream_render(
    node: StructureNode,
    options: Optional[RenderOptions] = None,
    *,
    context: Optional[RenderContext] = None,
) -> Iterator[str]:
    """Render a tree one line at a time, depth first and pre-order.

    Args:
        node: The node to start from; it is rendered at level 0 unless a context is given.
        options: Formatting options. Defaults to RenderOptions().
        context: Explicit starting context, overriding ``options``.

    Yields:
        Lines of the listing, each ending with a newline.

    Example:
        >>> root = StructureNode("root", kind=NodeKind.DIRECTORY)
        >>> a = StructureNode("a", parent=root, kind=NodeKind.DIRECTORY)
        >>> b = StructureNode("b", parent=a, kind=NodeKind.FILE)
        >>> for line in stream_render(root):
        ...     print(line, end="")
        root/
        |----a/
        |    |----b
    """
    if context is None:
        context = RenderContext(options if options is not None else RenderOptions())

    suffix = ""
    if node.kind is NodeKind.DIRECTORY and context.options.use_in_dir_character:
        suffix = context.options.in_dir_character
    yield f"{context.line_prefix()}{node.name}{suffix}\n"

    child_context = context.descend()
    for child in node.children:
        yield from stream_render(child, context=child_context)


def render(node: StructureNode, options: Optional[RenderOptions] = None) -> str:
    """Render a tree as a single string.

    Args:
        node: Root of the (sub)tree to render.
        options: Formatting options. Defaults to RenderOptions().

    Returns:
        str: The listing, one line per node, each line ending with a newline.

    Example:
        >>> root = StructureNode("root", kind=NodeKind.DIRECTORY)
        >>> a = StructureNode("a", parent=root, kind=NodeKind.DIRECTORY)
        >>> b = StructureNode("b", parent=a, kind=NodeKind.FILE)
        >>> render(root, RenderOptions(indent_character=" ", tabs=2, use_tree_character=False))
        'root/\\n  a/\\n    b\\n'
    """
    return "".join(stream_render(node, options))
