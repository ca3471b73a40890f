from sqlalchemy import Column, String, Text, Boolean
import enum

from mindyamsanzi.core.database import Base


class ResourceType(str, enum.Enum):
    TUTORING = "tutoring"
    PSYCHOSOCIAL = "psychosocial"
    MENTORSHIP = "mentorship"
    CAREER = "career"


class Mentor(Base):
    __tablename__ = "mentors"

    name = Column(String, nullable=False)
    expertise = Column(String, nullable=False)

    # Location
    location = Column(String, nullable=False)
    municipality = Column(String, nullable=True)

    contact_info = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    available = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Mentor(name={self.name}, municipality={self.municipality}, available={self.available})>"


class SupportResource(Base):
    __tablename__ = "support_resources"

    resource_type = Column(String, nullable=False)  # see ResourceType
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    # Location
    location = Column(String, nullable=True)
    municipality = Column(String, nullable=True)

    contact_info = Column(String, nullable=True)
    available = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<SupportResource(name={self.name}, type={self.resource_type}, municipality={self.municipality})>"
