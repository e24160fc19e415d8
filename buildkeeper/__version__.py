"""
buildkeeper version information.

Single source of truth for the package version. The version of
buildkeeper itself follows Semantic Versioning: https://semver.org/
"""

from __future__ import annotations

__version__ = "0.1.0"
