"""Rover telemetry service.

Accepts periodic rover submissions, gates them on the rover's status in
PostgreSQL, sends the embedded image to the analysis service, stores the
result and keeps a per-rover progress checkpoint in Redis.
"""
