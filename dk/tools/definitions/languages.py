"""Language runtimes and SDKs."""

from __future__ import annotations

from dk.tools.descriptor import SmokeTest, ToolDescriptor, VersionProbe
from dk.tools.parsers import regex, semver

GO = ToolDescriptor(
    name="go",
    display_name="Go",
    category="languages",
    executables=("go",),
    version=VersionProbe(args=("version",), parser=regex(r"go version go(\S+)")),
    common_paths=(r"%ProgramFiles%\Go\bin\go.exe", "/usr/local/go/bin/go"),
    packages={"winget": "GoLang.Go", "choco": "golang", "scoop": "go"},
    tests=(SmokeTest(("{exe}", "env", "GOROOT"), expect=r"\S"),),
    description="The Go toolchain",
)

RUST = ToolDescriptor(
    name="rust",
    display_name="Rust",
    category="languages",
    executables=("rustc", "cargo"),
    version=VersionProbe(parser=regex(r"rustc (\S+)")),
    common_paths=(r"%USERPROFILE%\.cargo\bin", "~/.cargo/bin"),
    packages={"winget": "Rustlang.Rustup", "choco": "rustup.install", "scoop": "rustup"},
    tests=(SmokeTest(("{bin:cargo}", "--version"), expect=r"cargo \d"),),
    description="Rust compiler and cargo, managed by rustup",
)

PYTHON = ToolDescriptor(
    name="python",
    display_name="Python",
    category="languages",
    executables=("python", "python3", "py"),
    version=VersionProbe(parser=regex(r"Python (\S+)")),
    common_paths=(r"%LOCALAPPDATA%\Programs\Python\Python3*\python.exe",),
    packages={"winget": "Python.Python.3.12", "choco": "python312", "scoop": "python"},
    tests=(SmokeTest(("{exe}", "-c", "print('ok')"), expect=r"^ok"),),
    description="CPython interpreter",
)

NODEJS = ToolDescriptor(
    name="nodejs",
    display_name="Node.js",
    category="languages",
    executables=("node",),
    version=VersionProbe(parser=regex(r"v?(\d+\.\d+\.\d+)")),
    common_paths=(r"%ProgramFiles%\nodejs\node.exe",),
    packages={"winget": "OpenJS.NodeJS.LTS", "choco": "nodejs-lts", "scoop": "nodejs-lts"},
    tests=(SmokeTest(("{exe}", "-e", "console.log('ok')"), expect=r"^ok"),),
    description="JavaScript runtime (LTS)",
)

JAVA = ToolDescriptor(
    name="java",
    display_name="Java (Temurin JDK)",
    category="languages",
    executables=("java",),
    # java prints its version banner to stderr
    version=VersionProbe(args=("-version",), parser=regex(r'version "([^"]+)"')),
    common_paths=(r"%ProgramFiles%\Eclipse Adoptium\jdk-*\bin\java.exe",),
    packages={"winget": "EclipseAdoptium.Temurin.21.JDK", "choco": "temurin21", "scoop": "temurin21-jdk"},
    tests=(SmokeTest(("{bin:javac}", "-version"), expect=r"javac"),),
    description="OpenJDK build from Eclipse Adoptium",
)

DOTNET = ToolDescriptor(
    name="dotnet",
    display_name=".NET SDK",
    category="languages",
    executables=("dotnet",),
    version=VersionProbe(parser=semver),
    common_paths=(r"%ProgramFiles%\dotnet\dotnet.exe",),
    packages={"winget": "Microsoft.DotNet.SDK.8", "choco": "dotnet-sdk", "scoop": "dotnet-sdk"},
    tests=(SmokeTest(("{exe}", "--list-sdks"), expect=r"\d+\.\d+"),),
    description="Microsoft .NET SDK",
)

TOOLS: tuple[ToolDescriptor, ...] = (GO, RUST, PYTHON, NODEJS, JAVA, DOTNET)
