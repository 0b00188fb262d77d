"""Frame sources and dataset loading."""

from .dataset_reader import DatasetCamera, DatasetReader
from .frame_source import Frame, FrameSource, StaticFrameSource

__all__ = ["DatasetCamera", "DatasetReader", "Frame", "FrameSource", "StaticFrameSource"]
