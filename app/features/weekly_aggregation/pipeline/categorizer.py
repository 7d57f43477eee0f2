"""
Exercise categorization.

Maps free-text exercise certifications onto a closed, ordered taxonomy by
case-insensitive keyword matching. The taxonomy is plain data so it can be
tuned for other languages without touching the matching logic.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

OTHER_CATEGORY = "기타"

# Order matters: the first category with a matching keyword wins.
DEFAULT_EXERCISE_TAXONOMY: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("러닝/조깅", ("러닝", "달리기", "조깅", "running", "jogging")),
    ("헬스/웨이트", ("헬스", "웨이트", "근력", "gym", "weight", "strength")),
    ("요가/필라테스", ("요가", "필라테스", "yoga", "pilates")),
    ("수영", ("수영", "swim")),
    ("자전거/사이클", ("자전거", "사이클", "cycling", "bike")),
    ("걷기/산책", ("걷기", "산책", "walk")),
    ("구기종목", ("축구", "농구", "배구", "테니스", "soccer", "basketball", "volleyball", "tennis")),
    ("등산/하이킹", ("등산", "하이킹", "hiking")),
)


class ExerciseCategorizer:
    def __init__(
        self,
        taxonomy: Iterable[tuple[str, Sequence[str]]] = DEFAULT_EXERCISE_TAXONOMY,
        fallback: str = OTHER_CATEGORY,
    ):
        self.taxonomy = tuple(
            (category, tuple(keyword.lower() for keyword in keywords if keyword))
            for category, keywords in taxonomy
        )
        self.fallback = fallback

    @property
    def categories(self) -> list[str]:
        return [category for category, _ in self.taxonomy] + [self.fallback]

    def categorize(self, text: str | None) -> str:
        lowered = (text or "").lower()
        if not lowered:
            return self.fallback

        for category, keywords in self.taxonomy:
            if any(keyword in lowered for keyword in keywords):
                return category
        return self.fallback
