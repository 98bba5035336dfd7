from .read_model import ReadModel
from .snapshot import SnapshotReadModel

__all__ = ("ReadModel", "SnapshotReadModel")
