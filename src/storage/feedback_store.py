# src/storage/feedback_store.py
"""商品反馈计数（仅内存，重启即丢失）"""

from typing import Dict, Literal

from src.models.schemas import FeedbackCounts


Rating = Literal["up", "down"]


class FeedbackStore:
    """每个商品只保留最近一次评价"""

    def __init__(self):
        self._ratings: Dict[str, Rating] = {}

    def add(self, product_id: str, rating: Rating) -> None:
        self._ratings[product_id] = rating

    def counts(self) -> FeedbackCounts:
        up = sum(1 for rating in self._ratings.values() if rating == "up")
        return FeedbackCounts(up=up, down=len(self._ratings) - up)
