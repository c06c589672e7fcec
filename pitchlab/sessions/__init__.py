"""Session registry with idle expiry.

Maps client-visible session ids to memory threads and personas.
"""

from pitchlab.sessions.service import SessionRegistry

__all__ = ["SessionRegistry"]
