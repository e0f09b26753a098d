"""
Roast selection boundary for Roast Master.

Design intent:
- Classify free text into a fixed roast category.
- Stay pure and stateless; no I/O and no model access.
"""
