from sqlalchemy import Column, String, Text, JSON, Uuid
import enum

from mindyamsanzi.core.database import Base


class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    # Owner
    student_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    # Message details
    role = Column(String, nullable=False)  # see MessageRole
    content = Column(Text, nullable=False)

    # e.g. which subject triggered an intervention; "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=True)

    def __repr__(self):
        return f"<ChatMessage(student_id={self.student_id}, role={self.role})>"
