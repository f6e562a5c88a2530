"""Infrastructure layer — operational concerns for the noise envelope service.

Modules:
    metrics     Prometheus metrics registry.
"""
