"""
Database models for users, reports and inspections.

Annotation lists, filter settings and the inspection's turbine hierarchy are kept
as JSON in the same camelCase form the API exchanges, so stored reports can be
loaded back into the editor unchanged.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from droneverse.data.db.base import Base


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, default="")
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class ReportRecord(Base):
    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    client_name: Mapped[str] = mapped_column(String)
    owner_id: Mapped[Optional[str]] = mapped_column(String, index=True, nullable=True)

    damages: Mapped[List["ReportDamageRecord"]] = relationship(
        "ReportDamageRecord",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="ReportDamageRecord.position",
        lazy="selectin",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )


class ReportDamageRecord(Base):
    __tablename__ = "report_damages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    report_id: Mapped[str] = mapped_column(ForeignKey("reports.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    turbine: Mapped[str] = mapped_column(String)
    blade: Mapped[str] = mapped_column(String)
    side: Mapped[str] = mapped_column(String)
    image_url: Mapped[str] = mapped_column(String)
    image_public_id: Mapped[str] = mapped_column(String)

    annotations: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    filters: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    fallback: Mapped[bool] = mapped_column(Boolean, default=False)
    error: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    report: Mapped[ReportRecord] = relationship("ReportRecord", back_populates="damages")


class InspectionRecord(Base):
    __tablename__ = "inspections"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    owner_id: Mapped[Optional[str]] = mapped_column(String, index=True, nullable=True)
    client_name: Mapped[str] = mapped_column(String)
    employee_name: Mapped[str] = mapped_column(String)

    location: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    # [{name, blades: [{name, sides: [{name, images: [{url, publicId}]}]}]}]
    turbines: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
