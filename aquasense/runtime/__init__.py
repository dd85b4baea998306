from aquasense.runtime.aggregation import ReportAggregator
from aquasense.runtime.base import PassResult
from aquasense.runtime.feeding import FeedingExecutor
from aquasense.runtime.guard import RuntimeRepository
from aquasense.runtime.runner import Runtime
from aquasense.runtime.sampling import SensorSampler

__all__ = [
    'FeedingExecutor',
    'PassResult',
    'ReportAggregator',
    'Runtime',
    'RuntimeRepository',
    'SensorSampler',
]
