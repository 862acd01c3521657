"""Test cluster lifecycle: provisioning, meshing and teardown of node instances."""

from dagdemo.cluster.mesh import MeshConnector
from dagdemo.cluster.protocols import HarnessFactory, NodeHarness
from dagdemo.cluster.provisioner import NodeHandle, provision, teardown_all
from dagdemo.cluster.simnet import SimNetHarnessFactory, SimNode

__all__ = [
    "HarnessFactory",
    "MeshConnector",
    "NodeHandle",
    "NodeHarness",
    "SimNetHarnessFactory",
    "SimNode",
    "provision",
    "teardown_all",
]
