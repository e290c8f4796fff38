"""
ViewSet: Plain Routes Package
==============================

What:  Routes of the demo app that are not ViewSet resources.

Route Inventory:
    - health.py:  GET /health   (service health check)

Resources (`/people`) are mounted by ViewSet.register() in viewset.main.
"""
