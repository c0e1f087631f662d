"""Core business logic layer.

Subpackages:
- defaults: smart-default distribution and split rebalancing
- packaging: sauce containers and pack bundles
- modifications: change detection against package defaults
- pricing: line items, modifiers, totals and the reactive pricing service
- breakdown: kitchen-ready physical counts

session.py wires these together around one StateStore per customer session.
"""
__all__ = ["defaults", "packaging", "modifications", "pricing", "breakdown", "session"]
