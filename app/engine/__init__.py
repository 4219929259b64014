"""
Calendar intelligence engine.

Pure computations over one fetched snapshot of a coach's calendar:
gap detection, optimization scoring, workload density, waitlist
priority, package expiry thresholds and no-show statistics.
"""
