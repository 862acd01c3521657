"""
dagdemo: render the block DAG of a freshly mined multi-node test cluster.

Provisions a cluster of test nodes, meshes them, mines on every node at
once, merges what each node saw into one canonical DAG and writes it out
as an HTML document with an embedded SVG.
"""

__version__ = "0.1.0"
