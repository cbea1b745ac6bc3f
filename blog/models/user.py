from sqlalchemy import Column, Text, DateTime, LargeBinary, Uuid
from blog.core.database import Base
from blog.core.security import hash_password, verify_password

DEFAULT_ROLE = "user"

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True)
    username = Column(Text, unique=True, nullable=False, index=True)
    password = Column(LargeBinary, nullable=False)
    role = Column(Text, nullable=False, default=DEFAULT_ROLE)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def set_password(self, password: str):
        self.password = hash_password(password)

    def verify_password(self, password: str) -> bool:
        return verify_password(password, self.password)
