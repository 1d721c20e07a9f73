"""Favourite ticker symbols, stored as one list under ``favorites``."""

from typing import List

from services.storage import KeyValueStore, load_json_list, save_json


FAVORITES_KEY = 'favorites'


class FavoritesService:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def list(self) -> List[str]:
        return [str(s) for s in load_json_list(self.store, FAVORITES_KEY)]

    def is_favorite(self, symbol: str) -> bool:
        return symbol.upper() in self.list()

    def toggle(self, symbol: str) -> bool:
        """Add or remove ``symbol``; returns True when it is now a favourite."""
        symbol = symbol.upper()
        favorites = self.list()
        if symbol in favorites:
            favorites.remove(symbol)
            added = False
        else:
            favorites.append(symbol)
            added = True
        save_json(self.store, FAVORITES_KEY, favorites)
        return added
