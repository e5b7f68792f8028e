"""The static pool of eliminable maps.

The catalog is loaded once at startup and never mutated; sessions copy it
whenever a game is (re)started.
"""

import json
from typing import Iterable, Optional, Tuple

from veto.models import Item


class CatalogError(ValueError):
    """Raised when a catalog file cannot be turned into a usable map pool."""


DEFAULT_MAPS: Tuple[Item, ...] = (
    Item(id='abyss', name='Abyss', icon='🏔️'),
    Item(id='ascent', name='Ascent', icon='🏛️'),
    Item(id='bind', name='Bind', icon='🏜️'),
    Item(id='corrode', name='Corrode', icon='🏭'),
    Item(id='haven', name='Haven', icon='🛕'),
    Item(id='icebox', name='Icebox', icon='❄️'),
    Item(id='lotus', name='Lotus', icon='🪷'),
    Item(id='pearl', name='Pearl', icon='🐚'),
    Item(id='sunset', name='Sunset', icon='🌇'),
)


def build_catalog(entries: Iterable[dict]) -> Tuple[Item, ...]:
    """Validate raw entries and freeze them into an ordered tuple of items.

    A veto needs at least two maps to have a loser, so shorter catalogs
    are rejected along with duplicate or blank ids.
    """
    items = []
    seen = set()
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise CatalogError(f'entry {index} is not an object')
        item_id = str(entry.get('id') or '').strip()
        if not item_id:
            raise CatalogError(f'entry {index} has no id')
        if item_id in seen:
            raise CatalogError(f'duplicate map id {item_id!r}')
        seen.add(item_id)
        items.append(Item(
            id=item_id,
            name=str(entry.get('name') or item_id),
            icon=str(entry.get('icon') or ''),
        ))
    if len(items) < 2:
        raise CatalogError('a catalog needs at least 2 maps')
    return tuple(items)


def load_catalog(path: Optional[str] = None) -> Tuple[Item, ...]:
    """Return the built-in map pool, or the one stored as a JSON list at `path`."""
    if not path:
        return DEFAULT_MAPS
    try:
        with open(path, encoding='utf-8') as fh:
            raw = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f'cannot read catalog {path}: {exc}') from exc
    if not isinstance(raw, list):
        raise CatalogError(f'catalog {path} must contain a JSON list')
    return build_catalog(raw)
