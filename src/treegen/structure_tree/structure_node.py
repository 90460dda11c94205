"""Node representation for entries of a structure tree."""

from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from anytree import Node

from treegen.types import NodeKind

if TYPE_CHECKING:
    from .render import RenderOptions


class StructureNode(Node):  # type: ignore
    """Node class representing one entry of a decoded structure.

    Extends anytree.Node with the entry kind and a per-node index of children by
    name. Sibling names are unique: attaching a second child with a name already
    present raises ValueError, so a node can be looked up by name in constant
    time while ``children`` keeps discovery order for rendering.

    Attributes:
        name (str): The entry name (a single path segment).
        parent (Optional[StructureNode]): The parent node in the tree.
        kind (NodeKind): FILE, DIRECTORY or UNSPECIFIED.
        children (tuple[StructureNode]): The child nodes in insertion order (inherited from anytree.Node).

    Example:
        >>> root = StructureNode("root", kind=NodeKind.DIRECTORY)
        >>> src = root.add_child("src", NodeKind.DIRECTORY)
        >>> root.add_child("src") is src
        True
        >>> [child.name for child in root.children]
        ['src']
        >>> StructureNode("src", parent=root)
        Traceback (most recent call last):
        ...
        ValueError: 'root' already has a child named 'src'
    """

    def __init__(
        self,
        name: str,
        parent: Optional["StructureNode"] = None,
        kind: Union[str, NodeKind] = NodeKind.UNSPECIFIED,
        **kwargs: Any,
    ) -> None:
        """Initialize a StructureNode.

        Args:
            name: The entry name.
            parent: The parent node. Defaults to None.
            kind: The entry kind, as a NodeKind or its value. Defaults to UNSPECIFIED.
            **kwargs: Additional arguments passed to anytree.Node.
        """
        self._children_by_name: Dict[str, "StructureNode"] = {}
        self.kind = NodeKind(kind)
        super().__init__(name, parent, **kwargs)

    @property
    def is_dir(self) -> bool:
        """Whether the node is known to be a directory."""
        return self.kind is NodeKind.DIRECTORY

    def get_child(self, name: str) -> Optional["StructureNode"]:
        """Return the direct child called ``name``, or None."""
        return self._children_by_name.get(name)

    def add_child(self, name: str, kind: Union[str, NodeKind] = NodeKind.UNSPECIFIED) -> "StructureNode":
        """Return the child called ``name``, creating it at the end if it does not exist.

        An existing child keeps the kind it was created with.

        Args:
            name: The child name.
            kind: Kind given to the child if it has to be created.

        Returns:
            StructureNode: The existing or newly appended child.
        """
        child = self.get_child(name)
        if child is None:
            child = StructureNode(name, parent=self, kind=kind)
        return child

    def render(self, options: Optional["RenderOptions"] = None) -> str:
        """Render this node and its descendants; see treegen.structure_tree.render.render."""
        from .render import render

        return render(self, options)

    def _pre_attach(self, parent: Node) -> None:
        siblings = getattr(parent, "_children_by_name", {})
        existing = siblings.get(self.name)
        if existing is not None and existing is not self:
            raise ValueError(f"'{parent.name}' already has a child named '{self.name}'")

    def _post_attach(self, parent: Node) -> None:
        siblings = getattr(parent, "_children_by_name", None)
        if siblings is not None:
            siblings[self.name] = self

    def _post_detach(self, parent: Node) -> None:
        siblings = getattr(parent, "_children_by_name", None)
        if siblings is not None and siblings.get(self.name) is self:
            del siblings[self.name]
