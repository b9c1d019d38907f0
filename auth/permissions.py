# auth/permissions.py
"""
Role hierarchy and site-level access rules.
"""

ADMIN = 'admin'
DIRECTOR = 'director'
EXTERNAL_SUPERVISOR = 'external_supervisor'
INTERNAL_SUPERVISOR = 'internal_supervisor'
SITE_AGENT = 'site_agent'
PROFESSOR = 'professor'

# Higher rank means more privileges. Both supervisor roles share a rank.
ROLE_HIERARCHY = {
    ADMIN: 5,
    DIRECTOR: 4,
    EXTERNAL_SUPERVISOR: 3,
    INTERNAL_SUPERVISOR: 3,
    SITE_AGENT: 2,
    PROFESSOR: 1,
}

ROLES = list(ROLE_HIERARCHY)

# Roles that see every site regardless of their site_access rows.
ALL_SITES_ROLES = (ADMIN, DIRECTOR)

# Roles allowed to submit new readings.
DATA_ENTRY_ROLES = (ADMIN, SITE_AGENT)


def has_permission(user_role, required_role):
    """True if user_role ranks at least as high as required_role. Unknown roles rank nowhere."""
    if user_role not in ROLE_HIERARCHY or required_role not in ROLE_HIERARCHY:
        return False
    return ROLE_HIERARCHY[user_role] >= ROLE_HIERARCHY[required_role]


def sees_all_sites(user):
    return user['role'] in ALL_SITES_ROLES


def can_access_site(user, site_id):
    """Checks a user dict (with 'role' and 'site_access') against one site."""
    return sees_all_sites(user) or site_id in user.get('site_access', [])


def visible_site_ids(user):
    """
    The site ids a user is limited to, or None when the user sees every site.
    """
    if sees_all_sites(user):
        return None
    return list(user.get('site_access', []))
