"""
nutrisnap - dish photo to nutrition estimate.

Structure:
- domain/: Models, pure policies (ranking, scaling, ranges, clarification) and ports
- application/: Use cases orchestrating the ports
- infrastructure/: Adapters (USDA, OpenAI, stubs, in-memory stores, retry)
"""

__version__ = "1.0.0"
