"""Interest lifecycle, mutual match detection and realtime notifications.

Ensures the local ``interest_hub`` package is resolved as a regular package
even though its layer directories are namespace packages.
"""
