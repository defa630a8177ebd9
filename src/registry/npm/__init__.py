"""NPM registry package.

- client.py: HTTP interaction with the npm registry and packument narrowing
"""

from .client import NpmRegistryClient, narrow_packument, package_url  # noqa: F401
