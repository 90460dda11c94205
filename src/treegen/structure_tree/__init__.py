"""Structure tree representation and rendering.

This package provides the node type built when structure text is decoded and
the functions that render a tree as an indented listing.
"""

from .render import RenderContext, RenderOptions, render, stream_render
from .structure_node import StructureNode

__all__ = ["RenderContext", "RenderOptions", "StructureNode", "render", "stream_render"]
