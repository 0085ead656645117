"""SQLAlchemy models."""
from sqlalchemy import Column, Integer, String, Float, ForeignKey, Table, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from settleup.database import Base

expense_participants = Table(
    "expense_participants",
    Base.metadata,
    Column("expense_id", Integer, ForeignKey("expenses.id"), primary_key=True),
    Column("attendee_id", Integer, ForeignKey("attendees.id"), primary_key=True),
)

group_members = Table(
    "group_members",
    Base.metadata,
    Column("group_id", Integer, ForeignKey("attendee_groups.id"), primary_key=True),
    Column("attendee_id", Integer, ForeignKey("attendees.id"), primary_key=True),
)


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    attendees = relationship(
        "Attendee", back_populates="project", order_by="Attendee.position", cascade="all, delete-orphan",
    )
    groups = relationship(
        "AttendeeGroup", back_populates="project", order_by="AttendeeGroup.id", cascade="all, delete-orphan",
    )
    expenses = relationship(
        "Expense", back_populates="project", order_by="Expense.id", cascade="all, delete-orphan",
    )


class Attendee(Base):
    __tablename__ = "attendees"
    __table_args__ = (UniqueConstraint("project_id", "name", name="uq_attendee_name"),)

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    name = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    project = relationship("Project", back_populates="attendees")
    groups = relationship("AttendeeGroup", secondary=group_members, back_populates="members")
    expenses_paid = relationship(
        "Expense", back_populates="payer", foreign_keys="Expense.payer_id", cascade="all",
    )
    participant_in = relationship(
        "Expense",
        secondary=expense_participants,
        back_populates="participants",
    )


class AttendeeGroup(Base):
    __tablename__ = "attendee_groups"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    name = Column(String(255), nullable=False)

    project = relationship("Project", back_populates="groups")
    members = relationship(
        "Attendee", secondary=group_members, back_populates="groups", order_by="Attendee.position",
    )


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    payer_id = Column(Integer, ForeignKey("attendees.id"), nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(String(512), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    project = relationship("Project", back_populates="expenses")
    payer = relationship("Attendee", back_populates="expenses_paid", foreign_keys=[payer_id])
    participants = relationship(
        "Attendee",
        secondary=expense_participants,
        back_populates="participant_in",
        order_by="Attendee.position",
    )
