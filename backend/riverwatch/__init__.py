"""River Watch: river simulation, threshold alerting and health scoring."""

__version__ = "1.0.0"
