"""Tool detection and provisioning.

This package knows which developer tools exist (descriptors, registry),
how to find them (Detector), how to install them (backends, Provisioner)
and how to check that they work (SmokeTester).
"""

from dk.tools.backends import Backend, build_backends
from dk.tools.descriptor import SmokeTest, ToolDescriptor, VersionProbe
from dk.tools.detector import Detector
from dk.tools.errors import ProvisionError, UnknownTarget, describe_error
from dk.tools.model import (
    Action,
    DetectionResult,
    DetectionStatus,
    ProvisionOptions,
    ProvisionResult,
)
from dk.tools.provisioner import Provisioner
from dk.tools.registry import GroupNotFoundError, Registry, ToolNotFoundError
from dk.tools.smoke import SmokeTester, SmokeTestResult

__all__ = [
    # backends
    "Backend",
    "build_backends",
    # descriptor
    "SmokeTest",
    "ToolDescriptor",
    "VersionProbe",
    # detection
    "DetectionResult",
    "DetectionStatus",
    "Detector",
    # provisioning
    "Action",
    "ProvisionError",
    "ProvisionOptions",
    "ProvisionResult",
    "Provisioner",
    "UnknownTarget",
    "describe_error",
    # registry
    "GroupNotFoundError",
    "Registry",
    "ToolNotFoundError",
    # smoke tests
    "SmokeTestResult",
    "SmokeTester",
]
