"""Video converter worker.

Consumes video conversion tasks from a PgQueuer queue, merges uploaded chunk
files, transcodes them to MPEG-DASH with ffmpeg, and records the result in
PostgreSQL.
"""

__version__ = "0.1.0"
