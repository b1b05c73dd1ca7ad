"""add reports table for logistics service reports

Revision ID: 002_add_reports_table
Revises: 001_baseline
Create Date: 2026-10-19 12:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002_add_reports_table'
down_revision = '001_baseline'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'reports',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('report_number', sa.String(50), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('product_id', sa.String(32), nullable=True),
        sa.Column('site_name', sa.String(255), nullable=True),
        sa.Column('site_code', sa.String(50), nullable=True),
        sa.Column('booking_id', sa.String(32), nullable=True),
        sa.Column('service_assignment_id', sa.String(32), nullable=True),
        sa.Column('reservation_number', sa.String(50), nullable=True),
        sa.Column('job_order_number', sa.String(50), nullable=True),
        sa.Column('job_order_type', sa.String(50), nullable=True),
        sa.Column('client_id', sa.String(32), nullable=True),
        sa.Column('client_name', sa.String(255), nullable=True),
        sa.Column('client_email', sa.String(255), nullable=True),
        sa.Column('seller_id', sa.String(32), nullable=True),
        sa.Column('sales', sa.String(255), nullable=True),
        sa.Column('booking_start', sa.DateTime(), nullable=True),
        sa.Column('booking_end', sa.DateTime(), nullable=True),
        sa.Column('breakdate', sa.DateTime(), nullable=True),
        sa.Column('report_type', sa.String(50), nullable=False),
        sa.Column('report_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('subcategory', sa.String(100), nullable=True),
        sa.Column('priority', sa.String(20), nullable=True),
        sa.Column('completion_percentage', sa.Integer(), nullable=True),
        sa.Column('installation_status', sa.String(20), nullable=True),
        sa.Column('installation_timeline', sa.String(50), nullable=True),
        sa.Column('delay_reason', sa.Text(), nullable=True),
        sa.Column('delay_days', sa.String(20), nullable=True),
        sa.Column('description_of_work', sa.Text(), nullable=True),
        sa.Column('location', sa.String(500), nullable=True),
        sa.Column('assigned_to', sa.String(255), nullable=True),
        sa.Column('requested_by', sa.JSON(), nullable=True),
        sa.Column('product', sa.JSON(), nullable=True),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.String(32), nullable=True),
        sa.Column('created_by_name', sa.String(255), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reports_report_number', 'reports', ['report_number'])
    op.create_index('ix_reports_company_id', 'reports', ['company_id'])
    op.create_index('ix_reports_product_id', 'reports', ['product_id'])
    op.create_index('ix_reports_booking_id', 'reports', ['booking_id'])
    op.create_index('ix_reports_service_assignment_id', 'reports', ['service_assignment_id'])
    op.create_index('ix_reports_report_type', 'reports', ['report_type'])
    op.create_index('ix_reports_status', 'reports', ['status'])
    op.create_index('ix_reports_deleted', 'reports', ['deleted'])


def downgrade():
    op.drop_index('ix_reports_deleted', table_name='reports')
    op.drop_index('ix_reports_status', table_name='reports')
    op.drop_index('ix_reports_report_type', table_name='reports')
    op.drop_index('ix_reports_service_assignment_id', table_name='reports')
    op.drop_index('ix_reports_booking_id', table_name='reports')
    op.drop_index('ix_reports_product_id', table_name='reports')
    op.drop_index('ix_reports_company_id', table_name='reports')
    op.drop_index('ix_reports_report_number', table_name='reports')
    op.drop_table('reports')
