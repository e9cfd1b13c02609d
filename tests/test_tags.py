from __future__ import annotations

from pathlib import Path

import pytest

from homebak_engine.errors import UnknownTagError
from homebak_engine.tags import (
    DEFAULT_TAG_REGISTRY,
    TagLocation,
    TagRegistry,
    render_tag_table,
)


def test_home_relative_tag_is_joined_onto_home() -> None:
    registry = TagRegistry({"notes": TagLocation("Documents/notes", True)})
    assert registry.resolve("notes", Path("/home/u")) == Path("/home/u/Documents/notes")


def test_absolute_tag_ignores_home() -> None:
    registry = TagRegistry({"hosts": TagLocation("/etc/hosts", False)})
    assert registry.resolve("hosts", Path("/home/u")) == Path("/etc/hosts")


def test_unknown_tag_raises() -> None:
    with pytest.raises(UnknownTagError):
        TagRegistry({}).resolve("nope", Path("/home/u"))


def test_default_registry_is_read_only() -> None:
    assert "nvim" in DEFAULT_TAG_REGISTRY
    with pytest.raises(TypeError):
        DEFAULT_TAG_REGISTRY.locations["new"] = TagLocation("x", True)  # type: ignore[index]


def test_render_tag_table_lists_sorted_names() -> None:
    registry = TagRegistry(
        {
            "zsh": TagLocation(".zshrc", True),
            "grub": TagLocation("/etc/default/grub", False),
        }
    )
    lines = render_tag_table(registry).splitlines()
    assert lines[0].startswith("grub")
    assert lines[0].endswith("/etc/default/grub")
    assert lines[1].endswith(".zshrc  (home)")
