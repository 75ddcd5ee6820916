"""dbforge monitor — read-only views of staging state for the terminal.

Modules
-------
projection
    ``StatusProjection`` probes the resource directory and produces
    ``CatalogSnapshot`` models: a frozen, point-in-time view.
renderer
    ``StatusRenderer`` turns snapshots, run reports and audit findings
    into Rich renderables.
live
    ``RichProgressSink`` draws live progress bars from progress events.
"""
