"""Containers and virtualization."""

from __future__ import annotations

from dk.tools.descriptor import SmokeTest, ToolDescriptor, VersionProbe
from dk.tools.parsers import regex, semver

DOCKER = ToolDescriptor(
    name="docker",
    display_name="Docker Desktop",
    category="containers",
    executables=("docker",),
    version=VersionProbe(parser=regex(r"Docker version ([^,\s]+)")),
    common_paths=(r"%ProgramFiles%\Docker\Docker\resources\bin\docker.exe",),
    packages={"winget": "Docker.DockerDesktop", "choco": "docker-desktop"},
    tests=(SmokeTest(("{exe}", "version", "--format", "{{.Client.Version}}"), expect=r"\d+\.\d+"),),
    description="Container engine and desktop UI",
)

WSL = ToolDescriptor(
    name="wsl",
    display_name="Windows Subsystem for Linux",
    category="containers",
    executables=("wsl",),
    version=VersionProbe(args=("--version",), parser=semver),
    common_paths=(r"%SystemRoot%\System32\wsl.exe",),
    packages={"winget": "Microsoft.WSL", "manual": "wsl --install --no-distribution"},
    tests=(SmokeTest(("{exe}", "--status"), expect=""),),
    companions=("ubuntu",),
    description="Linux environment on Windows",
)

UBUNTU = ToolDescriptor(
    name="ubuntu",
    display_name="Ubuntu (WSL)",
    category="containers",
    executables=("ubuntu", "ubuntu2204"),
    # The launcher has no version flag that exits without starting a shell.
    version=None,
    common_paths=(r"%LOCALAPPDATA%\Microsoft\WindowsApps\ubuntu*.exe",),
    packages={"winget": "Canonical.Ubuntu.2204", "manual": "wsl --install -d Ubuntu"},
    tests=(SmokeTest(("{exe}", "run", "uname", "-s"), expect=r"Linux"),),
    description="Ubuntu distribution for WSL",
)

KUBECTL = ToolDescriptor(
    name="kubectl",
    display_name="kubectl",
    category="containers",
    executables=("kubectl",),
    version=VersionProbe(args=("version", "--client"), parser=regex(r"Client Version:\s*v?(\S+)")),
    packages={"winget": "Kubernetes.kubectl", "choco": "kubernetes-cli", "scoop": "kubectl"},
    tests=(SmokeTest(("{exe}", "version", "--client"), expect=r"Client Version"),),
    description="Kubernetes command-line client",
)

TOOLS: tuple[ToolDescriptor, ...] = (DOCKER, WSL, UBUNTU, KUBECTL)
