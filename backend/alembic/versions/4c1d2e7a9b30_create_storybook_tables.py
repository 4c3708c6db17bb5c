"""create storybook tables

Revision ID: 4c1d2e7a9b30
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '4c1d2e7a9b30'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('external_id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_external_id', 'users', ['external_id'], unique=True)

    op.create_table(
        'books',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('page_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(), nullable=False, server_default='draft'),
        sa.Column('character_images', sa.JSON(), nullable=False),
        sa.Column('cover_design', sa.JSON(), nullable=True),
        sa.Column('print_format', sa.String(), nullable=True),
        sa.Column('pod_package_id', sa.String(), nullable=True),
        sa.Column('print_status', sa.String(), nullable=True),
        sa.Column('printed_page_count', sa.Integer(), nullable=True),
        sa.Column('interior_pdf_key', sa.String(), nullable=True),
        sa.Column('cover_pdf_key', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_books_user_id', 'books', ['user_id'])
    op.create_index('ix_books_status', 'books', ['status'])

    op.create_table(
        'pages',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('book_id', sa.Uuid(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('page_number', sa.Integer(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('story_text', sa.Text(), nullable=True),
        sa.Column('spread_layout', sa.String(), nullable=False, server_default='duo'),
        *_timestamps(),
        sa.UniqueConstraint('book_id', 'page_number', name='uq_pages_book_page_number'),
    )
    op.create_index('ix_pages_book_id', 'pages', ['book_id'])

    op.create_table(
        'images',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('page_id', sa.Uuid(), sa.ForeignKey('pages.id', ondelete='CASCADE'), nullable=False),
        sa.Column('original_key', sa.String(), nullable=False),
        sa.Column('original_mime_type', sa.String(), nullable=False, server_default='image/jpeg'),
        sa.Column('transformed_key', sa.String(), nullable=True),
        sa.Column('generation_status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_images_page_id', 'images', ['page_id'])
    op.create_index('ix_images_generation_status', 'images', ['generation_status'])

    op.create_table(
        'print_orders',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('book_id', sa.Uuid(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='pending_payment'),
        sa.Column('cost', sa.Integer(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('ship_name', sa.String(), nullable=False),
        sa.Column('ship_street1', sa.String(), nullable=False),
        sa.Column('ship_street2', sa.String(), nullable=True),
        sa.Column('ship_city', sa.String(), nullable=False),
        sa.Column('ship_state_code', sa.String(), nullable=False),
        sa.Column('ship_postal_code', sa.String(), nullable=False),
        sa.Column('ship_country_code', sa.String(), nullable=False, server_default='US'),
        sa.Column('ship_phone_number', sa.String(), nullable=False),
        sa.Column('contact_email', sa.String(), nullable=False),
        sa.Column('lulu_print_job_id', sa.String(), nullable=True),
        sa.Column('lulu_status', sa.String(), nullable=True),
        sa.Column('tracking_number', sa.String(), nullable=True),
        sa.Column('tracking_url', sa.String(), nullable=True),
        sa.Column('interior_pdf_url', sa.String(), nullable=True),
        sa.Column('cover_pdf_url', sa.String(), nullable=True),
        sa.Column('stripe_session_id', sa.String(), nullable=True),
        sa.Column('stripe_payment_intent_id', sa.String(), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('shipped_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('failed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_error', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_print_orders_book_id', 'print_orders', ['book_id'])
    op.create_index('ix_print_orders_status', 'print_orders', ['status'])
    op.create_index('ix_print_orders_stripe_session_id', 'print_orders', ['stripe_session_id'])


def downgrade() -> None:
    op.drop_table('print_orders')
    op.drop_table('images')
    op.drop_table('pages')
    op.drop_table('books')
    op.drop_table('users')
