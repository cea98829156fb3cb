"""Command-line tools (record, simulate, plot) and logging helpers.

The plotter pulls in Matplotlib, so import it directly from
:mod:`jointlog.tools.plotter` when needed.
"""
