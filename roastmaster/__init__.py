"""
Roast Master backend package.

Design intent:
- Serve text and audio roasts over a small HTTP API.
- Keep the roast classifier independent from speech recognition.
"""
