"""Services for clusters, CI/CD jobs, menus, roles and access policies."""

__version__ = "0.1.0"