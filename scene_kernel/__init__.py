"""
Scene Kernel - host object model and domain types for scene serialization.

Provides:
- The reference host object model (handles, components, behaviours, math structs)
- Immutable domain types (access policy, classification, member metadata)
- The intermediate SerializedNode tree and per-member diagnostics
- Structured JSON logging and the typed exception hierarchy
"""

__version__ = "0.1.0"
