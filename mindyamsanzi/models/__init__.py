from mindyamsanzi.core.database import Base
from .student_profile import StudentProfile
from .performance_record import PerformanceRecord
from .directory import Mentor, SupportResource, ResourceType
from .chat_message import ChatMessage, MessageRole

__all__ = [
    "Base",

    # Students
    "StudentProfile",
    "PerformanceRecord",

    # Directory
    "Mentor",
    "SupportResource",
    "ResourceType",

    # Conversation log
    "ChatMessage",
    "MessageRole",
]
