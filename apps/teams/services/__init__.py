"""
Teams app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    TeamNotFoundError,
    NotMemberError,
    NotTeamMemberError,
    AlreadyMemberError,
    InvalidInviteCodeError,
    LastAdminError,
    InvalidRoleError,
)

from .team_management import (
    create_team,
    update_team,
    delete_team,
    regenerate_invite_code,
    get_team,
    get_user_teams,
    require_membership,
    require_admin,
)

from .membership_management import (
    join_team,
    remove_member,
    update_member_role,
    get_team_members,
)

from .activity import (
    record_activity,
    list_activity,
)

from .balances import (
    get_member_balance,
    get_team_stats,
    get_team_leaderboard,
)


__all__ = [
    # Exceptions
    'TeamNotFoundError',
    'NotMemberError',
    'NotTeamMemberError',
    'AlreadyMemberError',
    'InvalidInviteCodeError',
    'LastAdminError',
    'InvalidRoleError',

    # Team Management
    'create_team',
    'update_team',
    'delete_team',
    'regenerate_invite_code',
    'get_team',
    'get_user_teams',
    'require_membership',
    'require_admin',

    # Membership Management
    'join_team',
    'remove_member',
    'update_member_role',
    'get_team_members',

    # Activity Log
    'record_activity',
    'list_activity',

    # Balances & Statistics
    'get_member_balance',
    'get_team_stats',
    'get_team_leaderboard',
]
