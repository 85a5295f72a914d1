from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import String, DateTime, ForeignKey, Integer, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knot.database import Base


class ApiType(str, PyEnum):
    HTTP = "HTTP"
    RPC = "RPC"


class HttpMethod(str, PyEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class Api(Base):
    __tablename__ = "apis"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    endpoint: Mapped[str] = mapped_column(Text, nullable=False)
    method: Mapped[HttpMethod | None] = mapped_column(SAEnum(HttpMethod), nullable=True)
    type: Mapped[ApiType] = mapped_column(SAEnum(ApiType), default=ApiType.HTTP, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    note: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    group: Mapped["Group"] = relationship(back_populates="apis")  # noqa: F821
    parameters: Mapped[list["Parameter"]] = relationship(  # noqa: F821
        back_populates="api",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="(Parameter.sort_order, Parameter.id)",
    )
