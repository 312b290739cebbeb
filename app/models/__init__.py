from app.models.learning_resource import LearningResource
from app.models.note import Note
from app.models.session import Session
from app.models.session_message import SessionMessage

__all__ = [
    "LearningResource",
    "Note",
    "Session",
    "SessionMessage",
]
