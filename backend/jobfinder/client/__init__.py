"""Client helpers for the JobFinder JSON API."""

from jobfinder.client.favorites_sync import FavoritesSync, FavoritesSyncError, SignInRequired

__all__ = ["FavoritesSync", "FavoritesSyncError", "SignInRequired"]
