"""initial schema

Revision ID: 4b8e21c7d0a3
Revises:
Create Date: 2024-08-01 09:12:31.402187

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b8e21c7d0a3'
down_revision = None
branch_labels = None
depends_on = None


eventtype_enum = sa.Enum('TOURNAMENT', 'SCORED', 'COMBINED_TEAM', name='eventtype')
eventstatus_enum = sa.Enum('UPCOMING', 'IN_PROGRESS', 'COMPLETED', name='eventstatus')
matchstatus_enum = sa.Enum(
    'SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', 'UNDETERMINED',
    name='matchstatus',
)
userrole_enum = sa.Enum('ADMIN', 'VIEWER', name='userrole')


def _slot_check(n):
    return sa.CheckConstraint(
        f'(team{n}_id IS NULL) <> (team{n}_from_match_id IS NULL)',
        name=op.f(f'ck_matches_team{n}_resolved_xor_pending'),
    )


def upgrade():
    op.create_table(
        'years',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_years')),
        sa.UniqueConstraint('year', name=op.f('uq_years_year')),
    )

    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('elo_rating', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_players')),
        sa.UniqueConstraint('name', name=op.f('uq_players_name')),
    )

    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('abbreviation', sa.String(length=10), nullable=False),
        sa.Column('color', sa.String(length=20), nullable=False),
        sa.Column('year_id', sa.Integer(), nullable=False),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['year_id'], ['years.id'], name=op.f('fk_teams_year_id_years')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_teams')),
        sa.UniqueConstraint('year_id', 'abbreviation', name='uq_teams_year_abbreviation'),
    )

    op.create_table(
        'team_members',
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['player_id'], ['players.id'], name=op.f('fk_team_members_player_id_players')),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name=op.f('fk_team_members_team_id_teams')),
        sa.PrimaryKeyConstraint('team_id', 'player_id', name=op.f('pk_team_members')),
    )

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('abbreviation', sa.String(length=10), nullable=False),
        sa.Column('symbol', sa.String(length=16), nullable=True),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('type', eventtype_enum, nullable=False),
        sa.Column('status', eventstatus_enum, nullable=False),
        sa.Column('year_id', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('points', sa.JSON(), nullable=False),
        sa.Column('final_standings', sa.JSON(), nullable=True),
        sa.Column('combined_team_data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['year_id'], ['years.id'], name=op.f('fk_events_year_id_years')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_events')),
        sa.UniqueConstraint('year_id', 'abbreviation', name='uq_events_year_abbreviation'),
    )

    op.create_table(
        'event_ratings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name=op.f('fk_event_ratings_event_id_events')),
        sa.ForeignKeyConstraint(['player_id'], ['players.id'], name=op.f('fk_event_ratings_player_id_players')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_event_ratings')),
        sa.UniqueConstraint('player_id', 'event_id', name='uq_event_ratings_player_event'),
    )

    op.create_table(
        'rating_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=True),
        sa.Column('old_rating', sa.Integer(), nullable=False),
        sa.Column('new_rating', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name=op.f('fk_rating_history_event_id_events')),
        sa.ForeignKeyConstraint(['player_id'], ['players.id'], name=op.f('fk_rating_history_player_id_players')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_rating_history')),
    )

    op.create_table(
        'participants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('seed', sa.Integer(), nullable=False),
        sa.Column('is_eliminated', sa.Boolean(), nullable=False),
        sa.Column('elimination_round', sa.Integer(), nullable=True),
        sa.Column('final_position', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name=op.f('fk_participants_event_id_events')),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name=op.f('fk_participants_team_id_teams')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_participants')),
        sa.UniqueConstraint('event_id', 'seed', name='uq_participants_event_seed'),
        sa.UniqueConstraint('event_id', 'team_id', name='uq_participants_event_team'),
    )

    op.create_table(
        'matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('round', sa.Integer(), nullable=False),
        sa.Column('match_number', sa.Integer(), nullable=False),
        sa.Column('is_winners_bracket', sa.Boolean(), nullable=False),
        sa.Column('is_grand_final', sa.Boolean(), nullable=False),
        sa.Column('is_if_necessary', sa.Boolean(), nullable=False),
        sa.Column('status', matchstatus_enum, nullable=False),
        sa.Column('team1_id', sa.Integer(), nullable=True),
        sa.Column('team2_id', sa.Integer(), nullable=True),
        sa.Column('team1_from_match_id', sa.Integer(), nullable=True),
        sa.Column('team1_is_winner', sa.Boolean(), nullable=True),
        sa.Column('team2_from_match_id', sa.Integer(), nullable=True),
        sa.Column('team2_is_winner', sa.Boolean(), nullable=True),
        sa.Column('winner_id', sa.Integer(), nullable=True),
        sa.Column('team1_score', sa.Integer(), nullable=True),
        sa.Column('team2_score', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            '(team1_score IS NULL OR team1_score >= 0) AND (team2_score IS NULL OR team2_score >= 0)',
            name=op.f('ck_matches_scores_non_negative'),
        ),
        _slot_check(1),
        _slot_check(2),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name=op.f('fk_matches_event_id_events')),
        sa.ForeignKeyConstraint(['team1_id'], ['teams.id'], name=op.f('fk_matches_team1_id_teams')),
        sa.ForeignKeyConstraint(['team2_id'], ['teams.id'], name=op.f('fk_matches_team2_id_teams')),
        sa.ForeignKeyConstraint(['winner_id'], ['teams.id'], name=op.f('fk_matches_winner_id_teams')),
        sa.ForeignKeyConstraint(
            ['team1_from_match_id'], ['matches.id'],
            name=op.f('fk_matches_team1_from_match_id_matches'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['team2_from_match_id'], ['matches.id'],
            name=op.f('fk_matches_team2_from_match_id_matches'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_matches')),
        sa.UniqueConstraint('event_id', 'match_number', name='uq_matches_event_match_number'),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('role', userrole_enum, nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['player_id'], ['players.id'], name=op.f('fk_users_player_id_players')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name=op.f('uq_users_email')),
        sa.UniqueConstraint('player_id', name=op.f('uq_users_player_id')),
    )


def downgrade():
    op.drop_table('users')
    op.drop_table('matches')
    op.drop_table('participants')
    op.drop_table('rating_history')
    op.drop_table('event_ratings')
    op.drop_table('events')
    op.drop_table('team_members')
    op.drop_table('teams')
    op.drop_table('players')
    op.drop_table('years')

    for enum in (userrole_enum, matchstatus_enum, eventstatus_enum, eventtype_enum):
        enum.drop(op.get_bind(), checkfirst=True)
