from __future__ import annotations

"""
Unit tests for the Embedded Resource Runtime.

Verifies:
1. Lookups and NotFound errors of embedded directories.
2. Live, uncached reads of development directories.
3. Provider selection from a generated module and the one-time
   configuration of the process-wide provider.
"""

import os
import sys
import types
from pathlib import Path

import pytest

import zapped
from zapped import (
    DevelopmentDirectory,
    DevelopmentProvider,
    EmbeddedDirectory,
    EmbeddedProvider,
    File,
    NotFound,
    ZappedError,
    load_registry,
)
from zapped import runtime


def make_embedded() -> EmbeddedDirectory:
    child = EmbeddedDirectory()
    child.add_file("b.txt", File(b"world"))
    root = EmbeddedDirectory()
    root.add_file("a.txt", File(b"hello"))
    root.add_directory("sub", child)
    return root


def fake_embed_module(development_mode: bool = False) -> types.ModuleType:
    module = types.ModuleType("zapped._zap_embed")
    module.DEVELOPMENT_MODE = development_mode

    def init(new_directory, new_file):
        d = new_directory()
        d.add_file("a.txt", new_file(b"hello"))
        return {"K": d}

    module.init = init
    return module


# -----------------------------------------------------------------------------
# Files and embedded directories
# -----------------------------------------------------------------------------

def test_file_accessors():
    f = File(b"caf\xc3\xa9")

    assert f.bytes() == b"caf\xc3\xa9"
    assert f.text() == "café"
    assert bytes(f) == f.bytes()
    assert len(f) == 5
    assert f == File(b"caf\xc3\xa9")


def test_embedded_lookups():
    root = make_embedded()

    assert root.file("a.txt").text() == "hello"
    assert root.directory("sub").file("b.txt").text() == "world"
    assert root.files() == ["a.txt"]
    assert root.directories() == ["sub"]


def test_embedded_missing_entries_raise_not_found():
    root = make_embedded()

    with pytest.raises(NotFound, match="a file with name nope.txt could not be found"):
        root.file("nope.txt")
    with pytest.raises(NotFound, match="a directory with name nope could not be found"):
        root.directory("nope")


def test_not_found_is_a_lookup_error():
    assert issubclass(NotFound, LookupError)
    assert issubclass(NotFound, ZappedError)


def test_freeze_is_recursive():
    root = make_embedded()
    root.freeze()

    with pytest.raises(RuntimeError):
        root.add_file("c.txt", File(b""))
    with pytest.raises(RuntimeError):
        root.directory("sub").add_directory("x", EmbeddedDirectory())


# -----------------------------------------------------------------------------
# Development directories
# -----------------------------------------------------------------------------

def test_development_reads_are_live(tmp_path: Path):
    (tmp_path / "a.txt").write_text("v1", encoding="utf-8")
    d = DevelopmentDirectory(str(tmp_path))

    assert d.file("a.txt").text() == "v1"
    (tmp_path / "a.txt").write_text("v2", encoding="utf-8")
    assert d.file("a.txt").text() == "v2"


def test_development_listing(tmp_path: Path):
    (tmp_path / "z.txt").write_text("", encoding="utf-8")
    (tmp_path / "a.txt").write_text("", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    d = DevelopmentDirectory(str(tmp_path))

    assert d.files() == ["a.txt", "z.txt"]
    assert d.directories() == ["sub"]


def test_development_directory_is_lazy(tmp_path: Path):
    missing = DevelopmentDirectory(str(tmp_path)).directory("missing")

    assert missing.path == os.path.join(str(tmp_path), "missing")
    with pytest.raises(FileNotFoundError):
        missing.file("x.txt")


def test_development_errors_are_os_errors(tmp_path: Path):
    with pytest.raises(OSError) as exc_info:
        DevelopmentDirectory(str(tmp_path)).file("missing.txt")

    assert not isinstance(exc_info.value, NotFound)


# -----------------------------------------------------------------------------
# Providers
# -----------------------------------------------------------------------------

def test_embedded_provider_unknown_key():
    provider = EmbeddedProvider({"K": make_embedded()})

    assert provider.keys() == ["K"]
    with pytest.raises(NotFound, match="resource with key MISSING could not be found"):
        provider.resource("MISSING", "ignored")


def test_embedded_provider_ignores_relative_path():
    root = make_embedded()
    provider = EmbeddedProvider({"K": root})

    assert provider.resource("K", "anything/else") is root


def test_development_provider_resolves_next_to_caller(tmp_path: Path):
    caller = str(tmp_path / "pkg" / "module.py")

    d = DevelopmentProvider().resource("K", "assets", caller=caller)

    assert d.path == os.path.join(str(tmp_path / "pkg"), "assets")


@pytest.mark.parametrize("caller", [None, "", "<stdin>", "<string>"])
def test_development_provider_needs_a_real_caller(caller):
    with pytest.raises(NotFound):
        DevelopmentProvider().resource("K", "assets", caller=caller)


def test_registry_selects_provider():
    embedded = load_registry(fake_embed_module())
    development = load_registry(fake_embed_module(development_mode=True))

    assert isinstance(embedded.provider(), EmbeddedProvider)
    assert embedded.resources["K"].file("a.txt").text() == "hello"
    assert isinstance(development.provider(), DevelopmentProvider)


# -----------------------------------------------------------------------------
# Process-wide provider
# -----------------------------------------------------------------------------

def test_falls_back_to_development_without_generated_module(monkeypatch):
    monkeypatch.delitem(sys.modules, "zapped._zap_embed", raising=False)

    d = zapped.Resource("K", "data")

    assert zapped.get_provider().development_mode is True
    assert d.path == os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")


def test_generated_module_is_loaded_on_first_use(monkeypatch):
    monkeypatch.setitem(sys.modules, "zapped._zap_embed", fake_embed_module())

    d = zapped.Resource("K", "ignored")

    assert isinstance(zapped.get_provider(), EmbeddedProvider)
    assert d.file("a.txt").text() == "hello"


def test_configure_installs_provider():
    root = make_embedded()
    zapped.configure(EmbeddedProvider({"K": root}))

    assert zapped.Resource("K", "x") is root


def test_configure_twice_raises():
    zapped.configure(DevelopmentProvider())

    with pytest.raises(RuntimeError):
        zapped.configure(DevelopmentProvider())


def test_configure_after_first_use_raises(monkeypatch):
    monkeypatch.setattr(runtime, "_provider", DevelopmentProvider())

    with pytest.raises(RuntimeError):
        zapped.configure(EmbeddedProvider({}))


def test_development_resource_reflects_edits(tmp_path: Path):
    pkg = tmp_path / "pkg"
    (pkg / "assets").mkdir(parents=True)
    (pkg / "assets" / "a.txt").write_text("before", encoding="utf-8")
    zapped.configure(DevelopmentProvider())

    d = zapped.get_provider().resource("K", "assets", caller=str(pkg / "file.py"))
    (pkg / "assets" / "a.txt").write_text("after", encoding="utf-8")

    assert d.file("a.txt").text() == "after"
