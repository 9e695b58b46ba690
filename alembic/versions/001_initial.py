# alembic/versions/001_initial.py

"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('pt_portfolios',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code')
    )

    op.create_table('pt_positions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('portfolio_id', sa.String(length=36), nullable=False),
        sa.Column('ticker', sa.String(length=20), nullable=False),
        sa.Column('company_name', sa.Text(), nullable=True),
        sa.Column('shares', sa.Numeric(precision=18, scale=6), nullable=False, server_default='0'),
        sa.Column('buy_price', sa.Numeric(precision=18, scale=4), nullable=False, server_default='0'),
        sa.Column('buy_date', sa.Date(), nullable=True),
        sa.Column('sell_target', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('stop_loss', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=10), nullable=False, server_default='open'),
        sa.Column('sold_price', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('sold_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['portfolio_id'], ['pt_portfolios.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "(status = 'open' AND sold_price IS NULL AND sold_date IS NULL) OR "
            "(status = 'closed' AND sold_price IS NOT NULL AND sold_date IS NOT NULL)",
            name='ck_pt_positions_sold_fields'
        )
    )
    op.create_index('idx_pt_positions_portfolio', 'pt_positions', ['portfolio_id'])
    op.create_index('idx_pt_positions_status', 'pt_positions', ['status'])

    op.create_table('pt_watchlist',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('portfolio_id', sa.String(length=36), nullable=False),
        sa.Column('ticker', sa.String(length=20), nullable=False),
        sa.Column('company_name', sa.Text(), nullable=True),
        sa.Column('target_buy', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['portfolio_id'], ['pt_portfolios.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_pt_watchlist_portfolio', 'pt_watchlist', ['portfolio_id'])


def downgrade():
    op.drop_index('idx_pt_watchlist_portfolio', table_name='pt_watchlist')
    op.drop_table('pt_watchlist')
    op.drop_index('idx_pt_positions_status', table_name='pt_positions')
    op.drop_index('idx_pt_positions_portfolio', table_name='pt_positions')
    op.drop_table('pt_positions')
    op.drop_table('pt_portfolios')
