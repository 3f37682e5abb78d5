"""Batch resolution modules."""

from .runner import BatchScheduler, BatchSummary, ContestUpdateResult
from .control import PipelineController

__all__ = ['BatchScheduler', 'BatchSummary', 'ContestUpdateResult', 'PipelineController']
