"""
Built-in ignore names and default ignore sources for file discovery.

These names use gitignore syntax and are matched at any depth below the base directory.
"""

from __future__ import annotations

# Version control metadata directories. Always ignored.
VCS_DIRS: list[str] = [
    ".git",
    ".sl",
    ".svn",
    ".hg",
]

# Ignored unless `with_node_modules` is set.
DEPENDENCY_DIR = "node_modules"

# The one ignore path that means "discover the whole .gitignore hierarchy"
# rather than "read this file".
GITIGNORE = ".gitignore"

# Marks the repository root when walking up for ancestor ignore files.
REPO_ROOT_MARKER = ".git"

# Read from the repository root before any .gitignore.
INFO_EXCLUDE = ".git/info/exclude"

DEFAULT_IGNORE_PATHS: list[str] = [GITIGNORE, ".prettierignore"]
