from .core.analytics import ProfilingPipeline, ProfilingSession, profile

__all__ = [
    "ProfilingPipeline",
    "ProfilingSession",
    "profile",
]
