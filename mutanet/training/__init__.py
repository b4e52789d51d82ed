from . import cost, rate
from .trainer import TrainOptions, TrainResult, test, train

__all__ = ["TrainOptions", "TrainResult", "cost", "rate", "test", "train"]
