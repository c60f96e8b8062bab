"""
Git repository state machine for gpass.

This module provides:
- Repository: branch, tag and commit transitions for secrets
- GitBackend protocol and its GitPython implementation
"""

from gpass.repo.gitpython_backend import GitPythonBackend
from gpass.repo.protocol import GitBackend
from gpass.repo.repository import ORPHAN_COMMIT_MESSAGE, Repository

__all__ = [
    "Repository",
    "ORPHAN_COMMIT_MESSAGE",
    "GitBackend",
    "GitPythonBackend",
]
