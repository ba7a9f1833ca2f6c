"""Sensor abstractions, including a virtual generator for offline testing."""

from .simulated_sensor import SimulatedSensor

__all__ = ["SimulatedSensor"]
