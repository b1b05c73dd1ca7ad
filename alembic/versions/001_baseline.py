"""baseline schema - all tables

Revision ID: 001_baseline
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = '001_baseline'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    # Users table
    op.create_table('users',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('middle_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('company_id', sa.String(64), nullable=True),
        sa.Column('roles', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('signature_url', sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_company_id', 'users', ['company_id'])

    # Clients table
    op.create_table('clients',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('designation', sa.String(255), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_by', sa.String(32), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_clients_company_id', 'clients', ['company_id'])
    op.create_index('ix_clients_deleted', 'clients', ['deleted'])

    # Products (sites) table
    op.create_table('products',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('site_code', sa.String(100), nullable=True),
        sa.Column('location', sa.Text(), nullable=True),
        sa.Column('type', sa.String(20), nullable=False, server_default='static'),
        sa.Column('price', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('specs', sa.JSON(), nullable=False),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_by', sa.String(32), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_company_id', 'products', ['company_id'])
    op.create_index('ix_products_deleted', 'products', ['deleted'])

    # Quotations table
    op.create_table('quotations',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('quotation_number', sa.String(50), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('product_id', sa.String(32), nullable=True),
        sa.Column('client_id', sa.String(32), nullable=True),
        sa.Column('proposal_id', sa.String(32), nullable=True),
        sa.Column('client_name', sa.String(255), nullable=True),
        sa.Column('client_email', sa.String(255), nullable=True),
        sa.Column('client_company_name', sa.String(255), nullable=True),
        sa.Column('client_phone', sa.String(50), nullable=True),
        sa.Column('client_address', sa.Text(), nullable=True),
        sa.Column('client_designation', sa.String(255), nullable=True),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('duration_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_amount', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('vat_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('vat_amount', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('valid_until', sa.DateTime(), nullable=True),
        sa.Column('password', sa.String(20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('viewed_at', sa.DateTime(), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('project_compliance', sa.JSON(), nullable=False),
        sa.Column('collection_status', sa.String(30), nullable=True),
        sa.Column('collection_progress', sa.Integer(), nullable=True),
        sa.Column('total_collected_amount', sa.Numeric(15, 2), nullable=True),
        sa.Column('total_pending_amount', sa.Numeric(15, 2), nullable=True),
        sa.Column('seller_id', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_quotations_quotation_number', 'quotations', ['quotation_number'], unique=True)
    op.create_index('ix_quotations_company_id', 'quotations', ['company_id'])
    op.create_index('ix_quotations_product_id', 'quotations', ['product_id'])
    op.create_index('ix_quotations_client_id', 'quotations', ['client_id'])
    op.create_index('ix_quotations_status', 'quotations', ['status'])
    op.create_index('ix_quotations_deleted', 'quotations', ['deleted'])

    # Cost estimates table
    op.create_table('cost_estimates',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('cost_estimate_number', sa.String(50), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('proposal_id', sa.String(32), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('client', sa.JSON(), nullable=False),
        sa.Column('line_items', sa.JSON(), nullable=False),
        sa.Column('total_amount', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('custom_message', sa.Text(), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('duration_days', sa.Integer(), nullable=True),
        sa.Column('valid_until', sa.DateTime(), nullable=True),
        sa.Column('password', sa.String(20), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('viewed_at', sa.DateTime(), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_cost_estimates_cost_estimate_number', 'cost_estimates', ['cost_estimate_number'], unique=True)
    op.create_index('ix_cost_estimates_company_id', 'cost_estimates', ['company_id'])
    op.create_index('ix_cost_estimates_proposal_id', 'cost_estimates', ['proposal_id'])
    op.create_index('ix_cost_estimates_status', 'cost_estimates', ['status'])
    op.create_index('ix_cost_estimates_deleted', 'cost_estimates', ['deleted'])

    # Proposals table
    op.create_table('proposals',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('client', sa.JSON(), nullable=False),
        sa.Column('products', sa.JSON(), nullable=False),
        sa.Column('total_amount', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('password', sa.String(20), nullable=True),
        sa.Column('valid_until', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('custom_message', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_proposals_company_id', 'proposals', ['company_id'])
    op.create_index('ix_proposals_status', 'proposals', ['status'])
    op.create_index('ix_proposals_deleted', 'proposals', ['deleted'])

    # Proposal activity log
    op.create_table('proposal_activities',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('proposal_id', sa.String(32), nullable=False),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('performed_by', sa.String(64), nullable=False),
        sa.Column('performed_by_name', sa.String(255), nullable=True),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['proposal_id'], ['proposals.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_proposal_activities_proposal_id', 'proposal_activities', ['proposal_id'])

    # Bookings table
    op.create_table('bookings',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('reservation_id', sa.String(50), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('quotation_id', sa.String(32), nullable=True),
        sa.Column('quotation_number', sa.String(50), nullable=True),
        sa.Column('product_id', sa.String(32), nullable=True),
        sa.Column('product_name', sa.String(255), nullable=True),
        sa.Column('client', sa.JSON(), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('cost_details', sa.JSON(), nullable=False),
        sa.Column('total_cost', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='RESERVED'),
        sa.Column('type', sa.String(30), nullable=False, server_default='RENTAL'),
        sa.Column('payment_method', sa.String(50), nullable=False, server_default='Manual Payment'),
        sa.Column('project_name', sa.String(255), nullable=True),
        sa.Column('cancel_reason', sa.Text(), nullable=True),
        sa.Column('project_compliance', sa.JSON(), nullable=False),
        sa.Column('user_id', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_bookings_reservation_id', 'bookings', ['reservation_id'])
    op.create_index('ix_bookings_company_id', 'bookings', ['company_id'])
    op.create_index('ix_bookings_quotation_id', 'bookings', ['quotation_id'])
    op.create_index('ix_bookings_product_id', 'bookings', ['product_id'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])
    op.create_index('ix_bookings_deleted', 'bookings', ['deleted'])

    # Collectibles table
    op.create_table('collectibles',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('booking_id', sa.String(32), nullable=True),
        sa.Column('quotation_id', sa.String(32), nullable=True),
        sa.Column('type', sa.String(20), nullable=False, server_default='sites'),
        sa.Column('client_name', sa.String(255), nullable=True),
        sa.Column('invoice_no', sa.String(100), nullable=True),
        sa.Column('bs_no', sa.String(100), nullable=True),
        sa.Column('covered_period', sa.String(100), nullable=True),
        sa.Column('total_amount', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('net_amount', sa.Numeric(15, 2), nullable=True),
        sa.Column('mode_of_payment', sa.String(50), nullable=True),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('collection_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('bir_2307_url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_collectibles_company_id', 'collectibles', ['company_id'])
    op.create_index('ix_collectibles_booking_id', 'collectibles', ['booking_id'])
    op.create_index('ix_collectibles_quotation_id', 'collectibles', ['quotation_id'])
    op.create_index('ix_collectibles_status', 'collectibles', ['status'])
    op.create_index('ix_collectibles_deleted', 'collectibles', ['deleted'])

    # Job orders table
    op.create_table('job_orders',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('jo_number', sa.String(50), nullable=False),
        sa.Column('jo_type', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('company_id', sa.String(64), nullable=True),
        sa.Column('quotation_id', sa.String(32), nullable=True),
        sa.Column('booking_id', sa.String(32), nullable=True),
        sa.Column('product_id', sa.String(32), nullable=True),
        sa.Column('site_name', sa.String(255), nullable=True),
        sa.Column('site_location', sa.Text(), nullable=True),
        sa.Column('client_name', sa.String(255), nullable=True),
        sa.Column('client_company', sa.String(255), nullable=True),
        sa.Column('date_requested', sa.DateTime(), nullable=True),
        sa.Column('deadline', sa.DateTime(), nullable=True),
        sa.Column('requested_by', sa.String(255), nullable=True),
        sa.Column('assign_to', sa.String(32), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('project_compliance', sa.JSON(), nullable=False),
        sa.Column('missing_compliance', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_job_orders_jo_number', 'job_orders', ['jo_number'])
    op.create_index('ix_job_orders_status', 'job_orders', ['status'])
    op.create_index('ix_job_orders_company_id', 'job_orders', ['company_id'])
    op.create_index('ix_job_orders_quotation_id', 'job_orders', ['quotation_id'])
    op.create_index('ix_job_orders_booking_id', 'job_orders', ['booking_id'])
    op.create_index('ix_job_orders_product_id', 'job_orders', ['product_id'])
    op.create_index('ix_job_orders_assign_to', 'job_orders', ['assign_to'])
    op.create_index('ix_job_orders_created_by', 'job_orders', ['created_by'])
    op.create_index('ix_job_orders_deleted', 'job_orders', ['deleted'])
    op.create_index('ix_job_orders_created_at', 'job_orders', ['created_at'])

    # Service assignments table
    op.create_table('service_assignments',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('sa_number', sa.String(20), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('job_order_id', sa.String(32), nullable=True),
        sa.Column('booking_id', sa.String(32), nullable=True),
        sa.Column('product_id', sa.String(32), nullable=True),
        sa.Column('site_name', sa.String(255), nullable=True),
        sa.Column('service_type', sa.String(50), nullable=False),
        sa.Column('assigned_to', sa.String(255), nullable=True),
        sa.Column('crew', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='Draft'),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('attachments', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_service_assignments_sa_number', 'service_assignments', ['sa_number'])
    op.create_index('ix_service_assignments_company_id', 'service_assignments', ['company_id'])
    op.create_index('ix_service_assignments_job_order_id', 'service_assignments', ['job_order_id'])
    op.create_index('ix_service_assignments_booking_id', 'service_assignments', ['booking_id'])
    op.create_index('ix_service_assignments_product_id', 'service_assignments', ['product_id'])
    op.create_index('ix_service_assignments_status', 'service_assignments', ['status'])
    op.create_index('ix_service_assignments_deleted', 'service_assignments', ['deleted'])

    # Notifications table
    op.create_table('notifications',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('user_id', sa.String(32), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=True),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('navigate_to', sa.String(500), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    # Fleet vehicles table
    op.create_table('fleet_vehicles',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('vehicle_number', sa.String(50), nullable=False),
        sa.Column('vehicle_type', sa.String(50), nullable=True),
        sa.Column('make', sa.String(100), nullable=True),
        sa.Column('model', sa.String(100), nullable=True),
        sa.Column('plate_number', sa.String(30), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('assigned_driver', sa.String(255), nullable=True),
        sa.Column('registration_expiry', sa.Date(), nullable=True),
        sa.Column('insurance_expiry', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_fleet_vehicles_company_id', 'fleet_vehicles', ['company_id'])
    op.create_index('ix_fleet_vehicles_deleted', 'fleet_vehicles', ['deleted'])
    op.create_index('ix_fleet_vehicles_created_at', 'fleet_vehicles', ['created_at'])

    # Assistant chat tables
    op.create_table('chat_conversations',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('session_id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(32), nullable=True),
        sa.Column('company_id', sa.String(64), nullable=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('message_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_message_at', sa.DateTime(), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_chat_conversations_session_id', 'chat_conversations', ['session_id'], unique=True)
    op.create_index('ix_chat_conversations_user_id', 'chat_conversations', ['user_id'])
    op.create_index('ix_chat_conversations_company_id', 'chat_conversations', ['company_id'])

    op.create_table('chat_messages',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('conversation_id', sa.String(32), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['conversation_id'], ['chat_conversations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_chat_messages_conversation_id', 'chat_messages', ['conversation_id'])

    # Company file manager
    op.create_table('company_folders',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('parent_id', sa.String(32), nullable=True),
        sa.Column('created_by', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['parent_id'], ['company_folders.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_company_folders_company_id', 'company_folders', ['company_id'])
    op.create_index('ix_company_folders_deleted', 'company_folders', ['deleted'])

    op.create_table('company_files',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('company_id', sa.String(64), nullable=False),
        sa.Column('folder_id', sa.String(32), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('original_filename', sa.String(255), nullable=False),
        sa.Column('storage_key', sa.String(500), nullable=False),
        sa.Column('url', sa.String(1000), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('mime_type', sa.String(100), nullable=True),
        sa.Column('uploaded_by', sa.String(32), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['folder_id'], ['company_folders.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_company_files_company_id', 'company_files', ['company_id'])
    op.create_index('ix_company_files_folder_id', 'company_files', ['folder_id'])
    op.create_index('ix_company_files_deleted', 'company_files', ['deleted'])


def downgrade():
    op.drop_table('company_files')
    op.drop_table('company_folders')
    op.drop_table('chat_messages')
    op.drop_table('chat_conversations')
    op.drop_table('fleet_vehicles')
    op.drop_table('notifications')
    op.drop_table('service_assignments')
    op.drop_table('job_orders')
    op.drop_table('collectibles')
    op.drop_table('bookings')
    op.drop_table('proposal_activities')
    op.drop_table('proposals')
    op.drop_table('cost_estimates')
    op.drop_table('quotations')
    op.drop_table('products')
    op.drop_table('clients')
    op.drop_table('users')
