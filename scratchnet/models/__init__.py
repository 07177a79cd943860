"""Model implementations."""

from .layer import Layer
from .logistic import LogisticRegression
from .network import Network
from .perceptron import Perceptron

__all__ = ["Layer", "LogisticRegression", "Network", "Perceptron"]
