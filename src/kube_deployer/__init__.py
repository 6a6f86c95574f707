"""Deploy and monitor containerized applications on Kubernetes."""

__version__ = "0.1.0"
