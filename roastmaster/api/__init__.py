"""
API orchestration boundary for Roast Master.

Design intent:
- Expose thin endpoints for text and audio roasts plus health.
- Keep request validation explicit and failure modes predictable.
"""
