"""Cycle orchestration and the recurring trigger."""

from goldpulse.pipeline.aggregator import SECTION_TITLES, PriceAggregator
from goldpulse.pipeline.scheduler import IntervalScheduler

__all__ = ["PriceAggregator", "IntervalScheduler", "SECTION_TITLES"]
