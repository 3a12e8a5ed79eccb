"""HTTP API for tubedesk.

Mounts the procedure router, the liveness probe and the optional
rate guard or development panel. No ingestion work happens here.
"""
