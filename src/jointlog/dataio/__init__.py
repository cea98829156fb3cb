"""Data input/output helpers (CSV recordings, metadata sidecars and paths).

Utility modules here keep disk-level concerns isolated from the rest of the
package:
- :mod:`csv_writer` turns collected samples into the joint table.
- :mod:`log_loader` reads recordings back for offline review.
- :mod:`meta` writes the ``.meta.json`` sidecar.
- :mod:`file_paths` centralises how recordings are named.
"""
