"""Page model"""

from sqlalchemy import Column, Text, DateTime, LargeBinary, Uuid
from blog.core.database import Base


class Page(Base):
    __tablename__ = "pages"

    # caller supplies the id (uuid4) before insert
    id = Column(Uuid, primary_key=True)

    title = Column(Text, nullable=False, default="")
    body = Column(LargeBinary, nullable=False, default=b"")

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    @property
    def text(self) -> str:
        """Body decoded for display"""
        return (self.body or b"").decode("utf-8", errors="replace")

    def __repr__(self):
        return f"<Page id={self.id} title={self.title!r}>"
