# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
from sqlalchemy import Column, Integer, String, Text, UniqueConstraint

from src.models.base import Base, TimestampMixin


class PermissionRule(Base, TimestampMixin):
    """Grants a role a scope for one action on one resource type.

    ``role`` and ``resource_type`` hold names rather than foreign keys so rules
    can exist for roles that have not been seeded yet.
    """

    __tablename__ = "permission_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role = Column(String(100), nullable=False, index=True)
    resource_type = Column(String(100), nullable=False, index=True)
    action = Column(String(20), nullable=False)
    scope = Column(String(20), nullable=False, default="own")
    description = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "role", "resource_type", "action", name="_permission_rule_triple_uc"
        ),
    )
