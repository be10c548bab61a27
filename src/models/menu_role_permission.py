# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from src.models.base import Base, TimestampMixin


class MenuRolePermission(Base, TimestampMixin):
    """Per-role visibility of a menu item.

    ``is_accessible`` is tri-state: NULL inherits ``can_view``, True grants,
    False revokes regardless of ``can_view``.
    """

    __tablename__ = "menu_role_permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(
        Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=True, index=True
    )
    role_name = Column(String(100), nullable=False)
    menu_item_id = Column(
        Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False
    )
    can_view = Column(Boolean, default=False, nullable=False)
    is_accessible = Column(Boolean, nullable=True)

    __table_args__ = (
        UniqueConstraint("role_name", "menu_item_id", name="_menu_role_item_uc"),
    )

    role = relationship("Role", back_populates="menu_permissions")
    menu_item = relationship("MenuItem")
