"""Calendar engine tables

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

booking_status = sa.Enum('scheduled', 'completed', 'cancelled', 'no_show', name='bookingstatus')
package_status = sa.Enum('active', 'completed', 'expired', 'cancelled', name='packagestatus')
waitlist_status = sa.Enum('active', 'notified', 'cancelled', 'converted', name='waitliststatus')
suggestion_status = sa.Enum('pending', 'accepted', 'rejected', 'expired', name='suggestionstatus')
suggestion_type = sa.Enum('reschedule', 'waitlist_fill', name='suggestiontype')
notification_type = sa.Enum('waitlist_slot_available', 'package_expiring_soon', 'no_show_alert',
                            'booking_rescheduled', name='notificationtype')
notification_status = sa.Enum('pending', 'sent', 'failed', name='notificationstatus')
no_show_severity = sa.Enum('warning', 'high', 'critical', name='noshowseverity')


def upgrade() -> None:
    """Create calendar, package, waitlist, suggestion and alert tables."""
    op.create_table('booking_packages', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('coach_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('total_sessions', sa.Integer(), nullable=False),
        sa.Column('sessions_used', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', package_status, nullable=False),
        sa.Column('is_shared', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('max_shared_users', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.CheckConstraint('sessions_used <= total_sessions', name='ck_booking_packages_usage_within_total'),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_booking_packages_coach_id'), 'booking_packages', ['coach_id'])
    op.create_index(op.f('ix_booking_packages_client_id'), 'booking_packages', ['client_id'])
    op.create_index(op.f('ix_booking_packages_end_date'), 'booking_packages', ['end_date'])
    op.create_index(op.f('ix_booking_packages_status'), 'booking_packages', ['status'])

    op.create_table('shared_package_usage', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('package_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('sessions_used', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('removed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['package_id'], ['booking_packages.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('package_id', 'client_id', name='uq_package_usage_package_client'))
    op.create_index(op.f('ix_shared_package_usage_package_id'), 'shared_package_usage', ['package_id'])
    op.create_index(op.f('ix_shared_package_usage_client_id'), 'shared_package_usage', ['client_id'])

    op.create_table('bookings', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('coach_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('status', booking_status, nullable=False),
        sa.Column('package_id', sa.Integer(), nullable=True),
        sa.Column('session_used_by_client_id', sa.Integer(), nullable=True),
        sa.Column('rescheduled_by_optimization', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancellation_reason', sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['package_id'], ['booking_packages.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_bookings_coach_id'), 'bookings', ['coach_id'])
    op.create_index(op.f('ix_bookings_client_id'), 'bookings', ['client_id'])
    op.create_index(op.f('ix_bookings_date'), 'bookings', ['date'])
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'])
    op.create_index(op.f('ix_bookings_package_id'), 'bookings', ['package_id'])

    op.create_table('availability_windows', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('coach_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_availability_windows_coach_id'), 'availability_windows', ['coach_id'])
    op.create_index(op.f('ix_availability_windows_date'), 'availability_windows', ['date'])

    op.create_table('client_preferences', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('coach_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('preferred_days', sa.JSON(), nullable=False),
        sa.Column('preferred_time_start', sa.Time(), nullable=True),
        sa.Column('preferred_time_end', sa.Time(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('coach_id', 'client_id', name='uq_client_preference_coach_client'))
    op.create_index(op.f('ix_client_preferences_coach_id'), 'client_preferences', ['coach_id'])
    op.create_index(op.f('ix_client_preferences_client_id'), 'client_preferences', ['client_id'])

    op.create_table('waitlist_entries', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('coach_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('preferred_days', sa.JSON(), nullable=False),
        sa.Column('preferred_time_start', sa.Time(), nullable=True),
        sa.Column('preferred_time_end', sa.Time(), nullable=True),
        sa.Column('package_id', sa.Integer(), nullable=True),
        sa.Column('notes', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column('status', waitlist_status, nullable=False),
        sa.Column('offered_date', sa.Date(), nullable=True),
        sa.Column('offered_start_time', sa.Time(), nullable=True),
        sa.Column('offered_end_time', sa.Time(), nullable=True),
        sa.Column('notified_at', sa.DateTime(), nullable=True),
        sa.Column('response_deadline', sa.DateTime(), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['package_id'], ['booking_packages.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_waitlist_entries_coach_id'), 'waitlist_entries', ['coach_id'])
    op.create_index(op.f('ix_waitlist_entries_client_id'), 'waitlist_entries', ['client_id'])
    op.create_index(op.f('ix_waitlist_entries_status'), 'waitlist_entries', ['status'])
    op.create_index(op.f('ix_waitlist_entries_response_deadline'), 'waitlist_entries', ['response_deadline'])

    op.create_table('optimization_suggestions', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('coach_id', sa.Integer(), nullable=False),
        sa.Column('suggestion_type', suggestion_type, nullable=False),
        sa.Column('source_booking_id', sa.Integer(), nullable=True),
        sa.Column('waitlist_entry_id', sa.Integer(), nullable=True),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('proposed_date', sa.Date(), nullable=False),
        sa.Column('proposed_start_time', sa.Time(), nullable=False),
        sa.Column('proposed_end_time', sa.Time(), nullable=False),
        sa.Column('gap_start_time', sa.Time(), nullable=False),
        sa.Column('gap_end_time', sa.Time(), nullable=False),
        sa.Column('benefit_score', sa.Integer(), nullable=False),
        sa.Column('reason', sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column('status', suggestion_status, nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('applied_at', sa.DateTime(), nullable=True),
        sa.Column('applied_booking_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['source_booking_id'], ['bookings.id']),
        sa.ForeignKeyConstraint(['waitlist_entry_id'], ['waitlist_entries.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_optimization_suggestions_coach_id'), 'optimization_suggestions', ['coach_id'])
    op.create_index(op.f('ix_optimization_suggestions_source_booking_id'), 'optimization_suggestions',
                    ['source_booking_id'])
    op.create_index(op.f('ix_optimization_suggestions_waitlist_entry_id'), 'optimization_suggestions',
                    ['waitlist_entry_id'])
    op.create_index(op.f('ix_optimization_suggestions_benefit_score'), 'optimization_suggestions',
                    ['benefit_score'])
    op.create_index(op.f('ix_optimization_suggestions_status'), 'optimization_suggestions', ['status'])

    op.create_table('notifications', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('notification_type', notification_type, nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('status', notification_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_notifications_recipient_id'), 'notifications', ['recipient_id'])
    op.create_index(op.f('ix_notifications_notification_type'), 'notifications', ['notification_type'])
    op.create_index(op.f('ix_notifications_created_at'), 'notifications', ['created_at'])

    op.create_table('no_show_alerts', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('coach_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('no_show_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('session_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('no_show_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('severity', no_show_severity, nullable=False),
        sa.Column('acknowledged_at', sa.DateTime(), nullable=True),
        sa.Column('coach_notes', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('coach_id', 'client_id', name='uq_no_show_alert_coach_client'))
    op.create_index(op.f('ix_no_show_alerts_coach_id'), 'no_show_alerts', ['coach_id'])
    op.create_index(op.f('ix_no_show_alerts_client_id'), 'no_show_alerts', ['client_id'])


def downgrade() -> None:
    """Drop every engine table (reverse dependency order)."""
    op.drop_table('no_show_alerts')
    op.drop_table('notifications')
    op.drop_table('optimization_suggestions')
    op.drop_table('waitlist_entries')
    op.drop_table('client_preferences')
    op.drop_table('availability_windows')
    op.drop_table('bookings')
    op.drop_table('shared_package_usage')
    op.drop_table('booking_packages')
    for enum in (no_show_severity, notification_status, notification_type, suggestion_type, suggestion_status,
                 waitlist_status, package_status, booking_status):
        enum.drop(op.get_bind(), checkfirst=True)
