from __future__ import annotations


class AccessPolicy:
    """Allow-list of user keys. An empty allow-list admits everyone."""

    def __init__(self, allowed_user_keys: frozenset[str] | set[str] | None = None):
        self._allowed = frozenset(k.strip() for k in (allowed_user_keys or ()) if k.strip())

    def is_allowed(self, user_key: str) -> bool:
        if not self._allowed:
            return True
        return user_key in self._allowed
