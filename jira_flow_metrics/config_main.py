from .calculators.cfd import CFDCalculator
from .calculators.cycletime import CycleTimeCalculator
from .calculators.distribution import DistributionCalculator
from .calculators.flowmetrics import FlowMetricsCalculator
from .calculators.histogram import HistogramCalculator
from .calculators.summary import SummaryCalculator
from .calculators.support import SupportMetricsCalculator
from .calculators.throughput import ThroughputCalculator
from .calculators.timeinstatus import TimeInStatusCalculator
from .calculators.timelines import TimelineCalculator

CALCULATORS = (
    TimelineCalculator,  # should come first
    # -- others depend on results from this one
    DistributionCalculator,
    TimeInStatusCalculator,
    CycleTimeCalculator,  # needs to come before histogram and summary
    HistogramCalculator,
    ThroughputCalculator,
    CFDCalculator,
    SupportMetricsCalculator,  # needs to come before summary
    SummaryCalculator,
    FlowMetricsCalculator,  # should come last
)

# The same pipeline, as run in memory by `process_metrics`
METRICS_CALCULATORS = CALCULATORS
