from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from .db import Base
import uuid


class User(Base):
    __tablename__ = "user"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(60), nullable=False)
    phone_number = Column(String(16), unique=True, index=True, nullable=False)

    credential = relationship("Password", back_populates="user", uselist=False)
    login_counter = relationship("LoginCounter", back_populates="user", uselist=False)


class Password(Base):
    """Salted password hash, read back only while logging in."""
    __tablename__ = "password"
    user_id = Column(String(36), ForeignKey("user.id", ondelete="CASCADE"), primary_key=True)
    password = Column(String, nullable=False)
    salt = Column(String(16), nullable=False)

    user = relationship("User", back_populates="credential")


class LoginCounter(Base):
    __tablename__ = "login"
    user_id = Column(String(36), ForeignKey("user.id", ondelete="CASCADE"), primary_key=True)
    success_login = Column(Integer, default=0, nullable=False)

    user = relationship("User", back_populates="login_counter")
