"""Infrastructure layer — operational concerns for the tuner.

Modules:
    metrics     Prometheus metrics registry (buffer outcomes, detection latency).
"""
