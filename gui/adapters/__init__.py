"""GUI adapter layer.

This package bridges the toolkit-agnostic binding engine to Qt.

Notes
-----
Adapters exist to:
- give the engine a stable identity and liveness test for Qt objects,
- turn `QObject.destroyed` into an observable,
- marshal stream events onto the GUI thread.
"""
