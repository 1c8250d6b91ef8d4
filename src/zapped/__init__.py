"""
Runtime accessor for directories embedded by zap.

    import zapped

    templates = zapped.Resource("TEMPLATES", "templates")
    page = templates.file("index.html").text()
"""

from .runtime import (
    Directory,
    DevelopmentDirectory,
    DevelopmentProvider,
    EmbeddedDirectory,
    EmbeddedProvider,
    File,
    NotFound,
    Registry,
    Resource,
    ResourceProvider,
    ZappedError,
    configure,
    get_provider,
    load_registry,
)

__all__ = [
    "Directory",
    "DevelopmentDirectory",
    "DevelopmentProvider",
    "EmbeddedDirectory",
    "EmbeddedProvider",
    "File",
    "NotFound",
    "Registry",
    "Resource",
    "ResourceProvider",
    "ZappedError",
    "configure",
    "get_provider",
    "load_registry",
]
