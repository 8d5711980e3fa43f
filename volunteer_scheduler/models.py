from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(50), default="volunteer", nullable=False)  # admin, leader, volunteer
    created_at = Column(DateTime, server_default=func.now())

    volunteers = relationship("Volunteer", back_populates="user")
    notifications = relationship("Notification", back_populates="user")


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    leader_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    leader = relationship("User")
    roles = relationship("Role", back_populates="team")
    volunteers = relationship("Volunteer", back_populates="team")


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    description = Column(Text, nullable=True)

    team = relationship("Team", back_populates="roles")


class Volunteer(Base):
    __tablename__ = "volunteers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)  # role of the same team
    is_trainee = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="volunteers")
    team = relationship("Team", back_populates="volunteers")
    role = relationship("Role")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=False)
    event_date = Column(DateTime, nullable=False, index=True)
    event_type = Column(String(50), nullable=False)  # service, special, ...
    recurrent = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    schedules = relationship("Schedule", back_populates="event")


class Schedule(Base):
    __tablename__ = "schedules"
    __table_args__ = (UniqueConstraint("event_id", "volunteer_id", name="uq_schedule_event_volunteer"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    volunteer_id = Column(Integer, ForeignKey("volunteers.id"), nullable=False, index=True)
    status = Column(String(50), default="confirmed", nullable=False)  # confirmed, pending, cancelled
    trainee_partner_id = Column(Integer, ForeignKey("volunteers.id"), nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    event = relationship("Event", back_populates="schedules")
    volunteer = relationship("Volunteer", foreign_keys=[volunteer_id])
    trainee_partner = relationship("Volunteer", foreign_keys=[trainee_partner_id])


class SwapRequest(Base):
    __tablename__ = "swap_requests"

    id = Column(Integer, primary_key=True, index=True)
    requestor_schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=False, index=True)
    target_schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=True, index=True)
    target_volunteer_id = Column(Integer, ForeignKey("volunteers.id"), nullable=True)
    reason = Column(Text, default="", nullable=False)
    status = Column(String(50), default="pending", nullable=False, index=True)  # pending, approved, rejected
    created_at = Column(DateTime, server_default=func.now())

    requestor_schedule = relationship("Schedule", foreign_keys=[requestor_schedule_id])
    target_schedule = relationship("Schedule", foreign_keys=[target_schedule_id])
    target_volunteer = relationship("Volunteer")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False)  # swap_request, ...
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="notifications")
