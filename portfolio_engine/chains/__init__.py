"""Chain balance providers and endpoint selection."""
from .endpoints import EndpointSelector

__all__ = ["EndpointSelector"]
