from __future__ import annotations

"""
Embedded Resource Runtime.

Accessor layer shared by applications and by the module generated by zap.
Two providers implement the same lookups: EmbeddedProvider serves the
directories baked into the generated module, DevelopmentProvider reads the
live filesystem next to the calling source file. The process-wide provider
is chosen once, on first use, and never changes afterwards.

This module must only import the standard library: it is copied verbatim
into projects that use zap.
"""

import importlib
import logging
import os
import sys
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType, ModuleType
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

EMBED_MODULE_NAME = "_zap_embed"


# -----------------------------------------------------------------------------
# ERRORS
# -----------------------------------------------------------------------------

class ZappedError(Exception):
    """Base class of runtime lookup errors."""


class NotFound(ZappedError, LookupError):
    """A resource, file or directory is not present."""


# -----------------------------------------------------------------------------
# FILES AND DIRECTORIES
# -----------------------------------------------------------------------------

class File:
    """The contents of one file."""

    __slots__ = ("_contents",)

    def __init__(self, contents: bytes) -> None:
        self._contents = bytes(contents)

    def bytes(self) -> bytes:
        return self._contents

    def text(self, encoding: str = "utf-8") -> str:
        return self._contents.decode(encoding)

    def __bytes__(self) -> bytes:
        return self._contents

    def __len__(self) -> int:
        return len(self._contents)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, File):
            return NotImplemented
        return self._contents == other._contents

    def __hash__(self) -> int:
        return hash(self._contents)

    def __repr__(self) -> str:
        return f"File({len(self._contents)} bytes)"


class Directory(ABC):
    """A directory of files and subdirectories, embedded or live."""

    @abstractmethod
    def file(self, name: str) -> File:
        """Return the file called ``name``."""

    @abstractmethod
    def directory(self, name: str) -> "Directory":
        """Return the subdirectory called ``name``."""

    @abstractmethod
    def files(self) -> List[str]:
        """Sorted names of the files in this directory."""

    @abstractmethod
    def directories(self) -> List[str]:
        """Sorted names of the subdirectories of this directory."""


class EmbeddedDirectory(Directory):
    """
    A directory whose contents were captured at generation time.

    Built by the generated module through add_file/add_directory, then
    frozen; lookups afterwards are plain mapping reads.
    """

    def __init__(self) -> None:
        self._files: Mapping[str, File] = {}
        self._directories: Mapping[str, EmbeddedDirectory] = {}
        self._frozen = False

    def add_file(self, name: str, file: File) -> None:
        self._check_mutable()
        self._files[name] = file  # type: ignore[index]

    def add_directory(self, name: str, directory: "EmbeddedDirectory") -> None:
        self._check_mutable()
        self._directories[name] = directory  # type: ignore[index]

    def freeze(self) -> None:
        """Make this directory and everything below it read-only."""
        if self._frozen:
            return
        self._frozen = True
        self._files = MappingProxyType(dict(self._files))
        self._directories = MappingProxyType(dict(self._directories))
        for child in self._directories.values():
            child.freeze()

    def file(self, name: str) -> File:
        try:
            return self._files[name]
        except KeyError:
            raise NotFound(f"a file with name {name} could not be found") from None

    def directory(self, name: str) -> "EmbeddedDirectory":
        try:
            return self._directories[name]
        except KeyError:
            raise NotFound(f"a directory with name {name} could not be found") from None

    def files(self) -> List[str]:
        return sorted(self._files)

    def directories(self) -> List[str]:
        return sorted(self._directories)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("embedded directories are read-only once loaded")


class DevelopmentDirectory(Directory):
    """
    A directory read through to the filesystem on every access.

    Nothing is cached. Existence is only checked when a file is read or the
    directory is listed.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def file(self, name: str) -> File:
        # OSError propagates: missing and unreadable stay distinguishable
        with open(os.path.join(self.path, name), "rb") as f:
            return File(f.read())

    def directory(self, name: str) -> "DevelopmentDirectory":
        return DevelopmentDirectory(os.path.join(self.path, name))

    def files(self) -> List[str]:
        with os.scandir(self.path) as it:
            return sorted(e.name for e in it if not e.is_dir())

    def directories(self) -> List[str]:
        with os.scandir(self.path) as it:
            return sorted(e.name for e in it if e.is_dir())

    def __repr__(self) -> str:
        return f"DevelopmentDirectory({self.path!r})"


# -----------------------------------------------------------------------------
# PROVIDERS
# -----------------------------------------------------------------------------

class ResourceProvider(ABC):
    """Strategy resolving resource keys into directories."""

    development_mode: bool = False

    @abstractmethod
    def resource(self, key: str, relative_path: str, caller: Optional[str] = None) -> Directory:
        """
        Look up a resource.

        Args:
            key: Key given to Resource() at the call site.
            relative_path: Directory path relative to the calling file.
            caller: Path of the source file issuing the call.
        """


class EmbeddedProvider(ResourceProvider):
    """Serves directories from an embedded key table."""

    development_mode = False

    def __init__(self, resources: Mapping[str, Directory]) -> None:
        self._resources = MappingProxyType(dict(resources))

    def resource(self, key: str, relative_path: str, caller: Optional[str] = None) -> Directory:
        try:
            return self._resources[key]
        except KeyError:
            raise NotFound(f"resource with key {key} could not be found") from None

    def keys(self) -> List[str]:
        return sorted(self._resources)


class DevelopmentProvider(ResourceProvider):
    """Resolves resources against the live filesystem next to the caller."""

    development_mode = True

    def resource(self, key: str, relative_path: str, caller: Optional[str] = None) -> Directory:
        if not caller or caller.startswith("<"):
            raise NotFound(f"was unable to get relative path for directory {relative_path}")
        base = os.path.dirname(os.path.abspath(caller))
        return DevelopmentDirectory(os.path.join(base, relative_path))


@dataclass(frozen=True)
class Registry:
    """
    Immutable outcome of loading a generated module.

    Attributes:
        development_mode: Flag baked into the module.
        resources: Key to embedded directory.
    """
    development_mode: bool
    resources: Mapping[str, Directory] = field(default_factory=lambda: MappingProxyType({}))

    def provider(self) -> ResourceProvider:
        if self.development_mode:
            return DevelopmentProvider()
        return EmbeddedProvider(self.resources)


def load_registry(module: ModuleType) -> Registry:
    """
    Instantiate the directories defined by a generated module.

    Args:
        module: A module produced by the zap code generator.

    Returns:
        Registry: Frozen directory graph and mode flag.
    """
    built: Dict[str, EmbeddedDirectory] = module.init(EmbeddedDirectory, File)
    for directory in built.values():
        directory.freeze()
    return Registry(
        development_mode=bool(module.DEVELOPMENT_MODE),
        resources=MappingProxyType(dict(built)),
    )


# -----------------------------------------------------------------------------
# PROCESS-WIDE PROVIDER
# -----------------------------------------------------------------------------

_provider: Optional[ResourceProvider] = None
_lock = threading.Lock()


def configure(provider: ResourceProvider) -> None:
    """
    Install the process-wide provider. Allowed once, before first use.

    Raises:
        RuntimeError: If a provider is already in place.
    """
    global _provider
    with _lock:
        if _provider is not None:
            raise RuntimeError("the resource provider has already been initialised")
        _provider = provider


def get_provider() -> ResourceProvider:
    """Return the process-wide provider, loading the embedded module on first use."""
    global _provider
    with _lock:
        if _provider is None:
            _provider = _default_provider()
        return _provider


def Resource(key: str, relative_path: str) -> Directory:
    """
    Look up the directory registered under ``key``.

    Embedded mode returns the baked-in directory. Development mode returns
    the live directory at ``relative_path`` next to the calling file.

    Both arguments must be string literals at the call site, since the
    embedding tool reads them without running the program.

    Raises:
        NotFound: If the key is unknown, or the caller cannot be located.
    """
    frame = sys._getframe(1)
    return get_provider().resource(key, relative_path, caller=frame.f_code.co_filename)


def _default_provider() -> ResourceProvider:
    package = __name__.rpartition(".")[0]
    embed_name = f"{package}.{EMBED_MODULE_NAME}" if package else EMBED_MODULE_NAME
    try:
        module = importlib.import_module(embed_name)
    except ModuleNotFoundError as e:
        if e.name != embed_name:
            raise
        logger.debug("No embedded module found; reading resources from disk.")
        return DevelopmentProvider()

    registry = load_registry(module)
    logger.debug(f"Loaded {len(registry.resources)} embedded resources.")
    return registry.provider()
