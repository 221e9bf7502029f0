"""Create packages table

Revision ID: 001_create_packages_table
Revises:
Create Date: 2025-01-10 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_create_packages_table'
down_revision = None
branch_labels = None
depends_on = None

package_status = sa.Enum('WAITING', 'PICKED', 'HANDED_OVER', 'EXPIRED', name='package_status')

def upgrade():
    op.create_table('packages',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('order_ref', sa.String(length=255), nullable=False),
        sa.Column('driver_code', sa.String(length=255), nullable=True),
        sa.Column('status', package_status, nullable=False, server_default='WAITING'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('picked_up_at', sa.DateTime(), nullable=True),
        sa.Column('handed_over_at', sa.DateTime(), nullable=True),
        sa.Column('expired_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_packages_id'), 'packages', ['id'], unique=False)
    op.create_index(op.f('ix_packages_order_ref'), 'packages', ['order_ref'], unique=True)
    op.create_index(op.f('ix_packages_status'), 'packages', ['status'], unique=False)
    op.create_index(op.f('ix_packages_created_at'), 'packages', ['created_at'], unique=False)

def downgrade():
    op.drop_index(op.f('ix_packages_created_at'), table_name='packages')
    op.drop_index(op.f('ix_packages_status'), table_name='packages')
    op.drop_index(op.f('ix_packages_order_ref'), table_name='packages')
    op.drop_index(op.f('ix_packages_id'), table_name='packages')
    op.drop_table('packages')
    package_status.drop(op.get_bind(), checkfirst=True)
