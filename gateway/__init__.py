"""
Gateway Service - HTTP front for the bracket engine

Responsibilities:
- Validate tournament parameters before anything reaches the remote services
- Start tournament runs and play them to completion
- Persist run summaries and their event streams
- Publish run events to Redis for live listeners
"""
