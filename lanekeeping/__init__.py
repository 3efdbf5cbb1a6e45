# lane keeping with an LQR steering controller

from .config import LaneKeepingConfig, DEFAULT_CONFIG, load_config
from .model import lateral_model
from .export import LaneKeepingRecord, LaneKeepingSummary, records, write_csv
from .pipeline import LaneKeepingResult, run_lane_keeping

__all__ = ['LaneKeepingConfig', 'DEFAULT_CONFIG', 'load_config',
           'lateral_model',
           'LaneKeepingRecord', 'LaneKeepingSummary', 'records', 'write_csv',
           'LaneKeepingResult', 'run_lane_keeping']
