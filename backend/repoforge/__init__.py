"""
repoforge - provisioning of the git repositories that back hosted projects.
"""

__version__ = "0.1.0"
