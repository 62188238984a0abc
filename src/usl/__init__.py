"""Universal Scalability Law modeling: fit and evaluate capacity models."""

from .datasets import Dataset, describe_datasets, get_measurements, list_datasets
from .errors import (
    FitDidNotConvergeError,
    InsufficientDataError,
    MalformedInputError,
    NonConvergenceError,
    UndefinedForLimitlessSystemError,
    USLError,
)
from .fitting import MIN_MEASUREMENTS, Fitter, LevenbergMarquardtFitter, build
from .jacobian import numerical_jacobian
from .loaders import load_measurements, measurements_frame
from .log import configure_logging, get_logger
from .measurement import Measurement
from .model import Model
from .solver import SolverConfig, SolverResult, levenberg_marquardt

__all__ = [
    "Dataset",
    "Fitter",
    "FitDidNotConvergeError",
    "InsufficientDataError",
    "LevenbergMarquardtFitter",
    "MIN_MEASUREMENTS",
    "MalformedInputError",
    "Measurement",
    "Model",
    "NonConvergenceError",
    "SolverConfig",
    "SolverResult",
    "USLError",
    "UndefinedForLimitlessSystemError",
    "build",
    "configure_logging",
    "describe_datasets",
    "get_logger",
    "get_measurements",
    "levenberg_marquardt",
    "list_datasets",
    "load_measurements",
    "measurements_frame",
    "numerical_jacobian",
]
