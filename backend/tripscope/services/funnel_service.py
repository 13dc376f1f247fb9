"""Funnel service: conversion vs the first stage, drop-off vs the previous stage."""

from dataclasses import dataclass
from typing import Iterable, Mapping

from tripscope.services.forecasting import round_half_up


@dataclass(frozen=True)
class FunnelStep:
    name: str
    count: int
    percentage: int  # of the first step
    dropoff: int     # lost since the previous step, 0 for the first

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "count": self.count,
            "percentage": self.percentage,
            "dropoff": self.dropoff,
        }


def build_funnel(steps: Iterable[Mapping]) -> list[FunnelStep]:
    """Turn ordered {"name", "count"} stages into funnel steps."""
    stages = list(steps)
    if not stages:
        return []

    first_count = stages[0]["count"] or 1
    funnel = []
    for i, stage in enumerate(stages):
        count = stage["count"]
        if i == 0:
            dropoff = 0
        else:
            prev = stages[i - 1]["count"]
            dropoff = round_half_up((prev - count) / max(prev, 1) * 100)
        funnel.append(FunnelStep(
            name=stage["name"],
            count=count,
            percentage=round_half_up(count / first_count * 100),
            dropoff=dropoff,
        ))
    return funnel
