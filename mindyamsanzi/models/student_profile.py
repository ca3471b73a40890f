from sqlalchemy import Column, String, Integer, DateTime

from mindyamsanzi.core.database import Base, utcnow


class StudentProfile(Base):
    __tablename__ = "profiles"

    # id is the auth provider's user id, one profile per identity

    # Profile information
    full_name = Column(String, nullable=False)
    location = Column(String, nullable=False, default="")
    municipality = Column(String, nullable=True)
    grade = Column(Integer, nullable=True)  # school grade level, e.g. 10
    school_name = Column(String, nullable=True)

    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def location_key(self):
        """Municipality when set, otherwise the free-text location"""
        return self.municipality or self.location or None

    def __repr__(self):
        return f"<StudentProfile(id={self.id}, full_name={self.full_name}, municipality={self.municipality})>"
