"""Add pets and feeding_schedules tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create pets and feeding_schedules tables."""
    op.create_table('pets', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('feeder_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('daily_allowance_grams', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('weight_kg', sa.Float(), nullable=True),
        sa.Column('food_kcal_per_100g', sa.Float(), nullable=True),
        sa.Column('neuter_status', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('activity_level', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('bowl_number', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('rfid_tag_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_pets_feeder_id'), 'pets', ['feeder_id'], unique=False)

    op.create_table('feeding_schedules', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('pet_id', sa.Integer(), nullable=False),
        sa.Column('feeder_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('time', sqlmodel.sql.sqltypes.AutoString(length=5), nullable=False),
        sa.Column('bowl_number', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_enabled', sa.Boolean(), nullable=True, server_default='true'),
        sa.Column('repeat_days', sa.JSON(), nullable=False),
        sa.Column('skipped_days', sa.JSON(), nullable=False),
        sa.Column('addon_grams', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('portion_grams', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['pet_id'], ['pets.id'], ),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_feeding_schedules_pet_id'), 'feeding_schedules', ['pet_id'], unique=False)
    op.create_index(op.f('ix_feeding_schedules_feeder_id'), 'feeding_schedules', ['feeder_id'], unique=False)
    op.create_index(op.f('ix_feeding_schedules_time'), 'feeding_schedules', ['time'], unique=False)


def downgrade() -> None:
    """Drop pets and feeding_schedules tables."""
    op.drop_index(op.f('ix_feeding_schedules_time'), table_name='feeding_schedules')
    op.drop_index(op.f('ix_feeding_schedules_feeder_id'), table_name='feeding_schedules')
    op.drop_index(op.f('ix_feeding_schedules_pet_id'), table_name='feeding_schedules')
    op.drop_table('feeding_schedules')
    op.drop_index(op.f('ix_pets_feeder_id'), table_name='pets')
    op.drop_table('pets')
