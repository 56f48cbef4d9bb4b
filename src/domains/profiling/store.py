"""In-memory profile store keyed by user email."""

import asyncio

from .models import UserProfile


class ProfileStore:
    """Current profile per user key, plus one lock per key.

    Only the classifier writes here, and only while holding lock_for(key).
    Readers always receive deep copies.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, key: str) -> asyncio.Lock:
        # No await between lookup and insert, so this is atomic on the event loop
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def get(self, key: str) -> UserProfile | None:
        profile = self._profiles.get(key)
        return profile.model_copy(deep=True) if profile is not None else None

    def replace(self, key: str, profile: UserProfile) -> None:
        self._profiles[key] = profile

    def all_profiles(self) -> list[UserProfile]:
        return [p.model_copy(deep=True) for p in list(self._profiles.values())]

    def keys(self) -> list[str]:
        return list(self._profiles)

    def __contains__(self, key: object) -> bool:
        return key in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)
