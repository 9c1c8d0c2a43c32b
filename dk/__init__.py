"""dk - developer tool provisioning.

Detects, installs, updates and removes developer tools through the host's
package managers (winget, choco, scoop) from a static tool registry.
"""

__version__ = "0.4.0"
