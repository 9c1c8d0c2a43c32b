"""Web browsers.

Browsers are rarely on PATH, so detection relies on install paths. Their
version flags are unreliable on Windows (the GUI starts instead), so the
probes are disabled and detection alone counts.
"""

from __future__ import annotations

from dk.tools.descriptor import ToolDescriptor

CHROME = ToolDescriptor(
    name="chrome",
    display_name="Google Chrome",
    category="browsers",
    executables=("chrome", "google-chrome"),
    version=None,
    common_paths=(
        r"%ProgramFiles%\Google\Chrome\Application\chrome.exe",
        r"%ProgramFiles(x86)%\Google\Chrome\Application\chrome.exe",
        r"%LOCALAPPDATA%\Google\Chrome\Application\chrome.exe",
    ),
    packages={"winget": "Google.Chrome", "choco": "googlechrome", "scoop": "googlechrome"},
)

FIREFOX = ToolDescriptor(
    name="firefox",
    display_name="Mozilla Firefox",
    category="browsers",
    executables=("firefox",),
    version=None,
    common_paths=(
        r"%ProgramFiles%\Mozilla Firefox\firefox.exe",
        r"%ProgramFiles(x86)%\Mozilla Firefox\firefox.exe",
    ),
    packages={"winget": "Mozilla.Firefox", "choco": "firefox", "scoop": "firefox"},
)

EDGE = ToolDescriptor(
    name="edge",
    display_name="Microsoft Edge",
    category="browsers",
    executables=("msedge",),
    version=None,
    common_paths=(
        r"%ProgramFiles(x86)%\Microsoft\Edge\Application\msedge.exe",
        r"%ProgramFiles%\Microsoft\Edge\Application\msedge.exe",
    ),
    packages={"winget": "Microsoft.Edge", "choco": "microsoft-edge"},
)

TOOLS: tuple[ToolDescriptor, ...] = (CHROME, FIREFOX, EDGE)
