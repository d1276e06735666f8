"""
SystemOS package repository server.

Publishes the package catalog (``/packages.json``) and serves artifact files
from ``<repo_root>/packages/<packageName>/<filename>``.
"""

__version__ = "1.0.0"
