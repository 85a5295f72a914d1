from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import String, DateTime, ForeignKey, Boolean, Integer, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knot.database import Base


class ParameterType(str, PyEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class ParamDirection(str, PyEnum):
    REQUEST = "request"
    RESPONSE = "response"


class Parameter(Base):
    """One flat row of a parameter tree; the nesting lives in ``parent_id`` only."""

    __tablename__ = "parameters"
    __table_args__ = (
        Index("idx_api_param", "api_id", "param_type", "sort_order"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    api_id: Mapped[int] = mapped_column(ForeignKey("apis.id", ondelete="CASCADE"), nullable=False)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("parameters.id", ondelete="CASCADE"), index=True, default=None
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Kept as a plain string: rows written by older clients may carry types outside ParameterType
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    required: Mapped[bool] = mapped_column(Boolean, default=False)
    param_type: Mapped[str] = mapped_column(String(10), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    api: Mapped["Api"] = relationship(back_populates="parameters")  # noqa: F821
