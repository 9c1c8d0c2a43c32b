"""Package managers themselves. dk can bootstrap choco and scoop."""

from __future__ import annotations

from dk.tools.descriptor import SmokeTest, ToolDescriptor

WINGET = ToolDescriptor(
    name="winget",
    display_name="Windows Package Manager",
    category="package-managers",
    executables=("winget",),
    common_paths=(r"%LOCALAPPDATA%\Microsoft\WindowsApps\winget.exe",),
    packages={"winget": "Microsoft.AppInstaller"},
    tests=(SmokeTest(("{exe}", "--info"), expect=r"Windows Package Manager"),),
    description="Microsoft's package manager, shipped with App Installer",
)

CHOCO = ToolDescriptor(
    name="choco",
    display_name="Chocolatey",
    category="package-managers",
    executables=("choco",),
    common_paths=(r"%ProgramData%\chocolatey\bin\choco.exe",),
    packages={"winget": "Chocolatey.Chocolatey"},
    tests=(SmokeTest(("{exe}", "--version"), expect=r"\d+\.\d+"),),
    description="Community package manager for Windows",
)

SCOOP = ToolDescriptor(
    name="scoop",
    display_name="Scoop",
    category="package-managers",
    executables=("scoop",),
    common_paths=(r"%USERPROFILE%\scoop\shims\scoop.cmd", "~/scoop/shims"),
    tests=(SmokeTest(("{exe}", "help"), expect=r"usage"),),
    description="User-level command-line installer",
)

TOOLS: tuple[ToolDescriptor, ...] = (WINGET, CHOCO, SCOOP)
