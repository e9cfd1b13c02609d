"""
Tag registry: short names for well-known backup locations.

A tag maps to one path, either relative to the user's home directory or
absolute. The registry is an immutable value passed to the planner so tests can
substitute their own table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

from homebak_engine.errors import UnknownTagError


@dataclass(frozen=True, slots=True)
class TagLocation:
    """
    Location a tag refers to.

    Attributes
    ----------
    path:
        Path string. Relative to the home directory when ``is_under_home``.
    is_under_home:
        Whether ``path`` is joined onto the home directory.
    """

    path: str
    is_under_home: bool


DEFAULT_TAG_LOCATIONS: Mapping[str, TagLocation] = MappingProxyType(
    {
        "config": TagLocation(".config", True),
        "local-share": TagLocation(".local/share", True),
        "local-bin": TagLocation(".local/bin", True),
        "bashrc": TagLocation(".bashrc", True),
        "zshrc": TagLocation(".zshrc", True),
        "fish": TagLocation(".config/fish", True),
        "starship": TagLocation(".config/starship.toml", True),
        "nvim": TagLocation(".config/nvim", True),
        "kitty": TagLocation(".config/kitty", True),
        "alacritty": TagLocation(".config/alacritty", True),
        "wezterm": TagLocation(".config/wezterm", True),
        "hypr": TagLocation(".config/hypr", True),
        "sway": TagLocation(".config/sway", True),
        "i3": TagLocation(".config/i3", True),
        "waybar": TagLocation(".config/waybar", True),
        "rofi": TagLocation(".config/rofi", True),
        "themes": TagLocation(".themes", True),
        "icons": TagLocation(".icons", True),
        "fonts": TagLocation(".local/share/fonts", True),
        "wallpapers": TagLocation("Pictures/Wallpapers", True),
        "ssh": TagLocation(".ssh", True),
        "gitconfig": TagLocation(".gitconfig", True),
        "sddm-themes": TagLocation("/usr/share/sddm/themes", False),
        "grub": TagLocation("/etc/default/grub", False),
    }
)


@dataclass(frozen=True, slots=True)
class TagRegistry:
    """Read-only lookup from tag name to location."""

    locations: Mapping[str, TagLocation] = field(default_factory=lambda: DEFAULT_TAG_LOCATIONS)

    def __contains__(self, tag: object) -> bool:
        return tag in self.locations

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.locations))

    def resolve(self, tag: str, home_dir: Path) -> Path:
        """
        Return the filesystem path a tag refers to.

        Parameters
        ----------
        tag:
            Tag name.
        home_dir:
            Home directory joined onto home-relative tag paths.

        Returns
        -------
        pathlib.Path
            The tag's path. Home-relative tags are rooted at ``home_dir``.

        Raises
        ------
        UnknownTagError
            If ``tag`` is not in the registry.
        """
        try:
            location = self.locations[tag]
        except KeyError as exc:
            raise UnknownTagError(f"Unknown tag: {tag!r}. Use --list-tags to see available tags.") from exc

        if location.is_under_home:
            return home_dir / location.path
        return Path(location.path)


DEFAULT_TAG_REGISTRY = TagRegistry()


def render_tag_table(registry: TagRegistry) -> str:
    """Render the registry as aligned ``name  path  (home)`` lines."""
    names = list(registry)
    if not names:
        return "No tags defined."
    width = max(len(name) for name in names)
    lines: list[str] = []
    for name in names:
        location = registry.locations[name]
        suffix = "  (home)" if location.is_under_home else ""
        lines.append(f"{name.ljust(width)}  {location.path}{suffix}")
    return "\n".join(lines)
