"""drainbench: measure how a buffered file write stream behaves under backpressure."""

__version__ = "0.1.0"
