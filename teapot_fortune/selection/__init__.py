"""Random entry selection over the sparse id space."""

from .selector import FortuneSelector, NoContentAvailable

__all__ = ["FortuneSelector", "NoContentAvailable"]
