import threading

BADGE_GLYPH = "!"


class BadgeAnnotator:
    """Badge state per scheduled-course card. Setting or clearing twice is a no-op."""

    def __init__(self):
        self._lock = threading.Lock()
        self._badges: dict[str, dict] = {}

    def set_badge(self, card, tooltip: str) -> None:
        with self._lock:
            self._badges[card] = {"glyph": BADGE_GLYPH, "tooltip": tooltip}

    def clear_badge(self, card) -> None:
        with self._lock:
            self._badges.pop(card, None)

    def clear_all(self) -> None:
        with self._lock:
            self._badges.clear()

    def retain(self, cards) -> None:
        """Drops badges for every card not in cards."""
        keep = set(cards)
        with self._lock:
            for card in [c for c in self._badges if c not in keep]:
                del self._badges[card]

    def get(self, card) -> dict | None:
        with self._lock:
            badge = self._badges.get(card)
            return dict(badge) if badge else None

    def snapshot(self) -> dict[str, dict]:
        with self._lock:
            return {card: dict(badge) for card, badge in self._badges.items()}
