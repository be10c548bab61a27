# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
from sqlalchemy import Column, Integer, String, Text

from src.models.base import Base, TimestampMixin


class ResourceType(Base, TimestampMixin):
    """A protectable noun such as ``qr_code`` or ``url_analytics``."""

    __tablename__ = "resource_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
