"""Database servers and shells. Versions come from the category parser."""

from __future__ import annotations

from dk.tools.descriptor import SmokeTest, ToolDescriptor

POSTGRESQL = ToolDescriptor(
    name="postgresql",
    display_name="PostgreSQL",
    category="databases",
    executables=("psql",),
    common_paths=(r"%ProgramFiles%\PostgreSQL\*\bin\psql.exe",),
    packages={"winget": "PostgreSQL.PostgreSQL.16", "choco": "postgresql16", "scoop": "postgresql"},
    tests=(SmokeTest(("{exe}", "--version"), expect=r"PostgreSQL"),),
    description="PostgreSQL server and psql client",
)

MYSQL = ToolDescriptor(
    name="mysql",
    display_name="MySQL",
    category="databases",
    executables=("mysql",),
    common_paths=(r"%ProgramFiles%\MySQL\MySQL Server *\bin\mysql.exe",),
    packages={"winget": "Oracle.MySQL", "choco": "mysql", "scoop": "mysql"},
    tests=(SmokeTest(("{exe}", "--version"), expect=r"mysql"),),
    description="MySQL server and client",
)

SQLITE = ToolDescriptor(
    name="sqlite",
    display_name="SQLite",
    category="databases",
    executables=("sqlite3",),
    packages={"winget": "SQLite.SQLite", "choco": "sqlite", "scoop": "sqlite"},
    tests=(SmokeTest(("{exe}", ":memory:", "select 40 + 2;"), expect=r"^42"),),
    description="SQLite command-line shell",
)

MONGOSH = ToolDescriptor(
    name="mongosh",
    display_name="MongoDB Shell",
    category="databases",
    executables=("mongosh",),
    common_paths=(r"%LOCALAPPDATA%\Programs\mongosh\mongosh.exe",),
    packages={"winget": "MongoDB.Shell", "choco": "mongodb-shell", "scoop": "mongosh"},
    description="MongoDB interactive shell",
)

TOOLS: tuple[ToolDescriptor, ...] = (POSTGRESQL, MYSQL, SQLITE, MONGOSH)
