"""Delivery completion progress for routes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ...models.domain import DeliveryStatus, PlannedStop


@dataclass(frozen=True, slots=True)
class DeliveryProgress:
    delivered: int
    total: int

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.delivered / self.total * 100.0, 1)


def delivery_progress(stops: Sequence[PlannedStop]) -> DeliveryProgress:
    delivered = sum(1 for stop in stops if stop.delivery_status is DeliveryStatus.DELIVERED)
    return DeliveryProgress(delivered=delivered, total=len(stops))
