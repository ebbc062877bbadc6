"""Product sample registration and lifecycle."""
from core.samples.registry import ProductSampleRegistry

__all__ = ['ProductSampleRegistry']
