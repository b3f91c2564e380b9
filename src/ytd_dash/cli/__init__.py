"""CLI layer — argument parsing, stream tables, diagnostics, error boundary.

The outermost layer: it wires providers into the manifest service and
owns stdout/stderr.  It may import from ``core`` and ``infra``; neither
of them imports from ``cli``.
"""
