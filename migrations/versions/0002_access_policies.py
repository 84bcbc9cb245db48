"""access policies

Row-level-security policies for orders, order_items, products, coupons and
contact_messages. PostgreSQL only; other dialects are left untouched.

"""
from typing import Sequence, Union

from alembic import op
from sqlalchemy import text

from naturalpuff.services.access_policy import TABLE_POLICIES, drop_statements, policy_statements


revision: str = "0002_access_policies"
down_revision: Union[str, None] = "0001_initial_models"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name != "postgresql":
        return
    for table in TABLE_POLICIES:
        for sql in policy_statements(table):
            bind.execute(text(sql))


def downgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name != "postgresql":
        return
    for table in TABLE_POLICIES:
        for sql in drop_statements(table):
            bind.execute(text(sql))
