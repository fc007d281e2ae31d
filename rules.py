from errors import Forbidden

# Which donation types each collector role may see and collect.
COLLECTOR_TYPES = {
    'ngo': frozenset({'packed', 'fresh'}),
    'biogas': frozenset({'organic'}),
}
COLLECTOR_ROLES = tuple(COLLECTOR_TYPES)

COLLECT_DENIED = {
    'ngo': 'NGO agents can only collect fresh and packed food',
    'biogas': 'Biogas agents can only collect organic waste',
}


def visible_types_for(role):
    return COLLECTOR_TYPES.get(role, frozenset())


def can_collect(role, donation_type):
    return donation_type in visible_types_for(role)


def require_role(user, *roles, message=None):
    """Raises Forbidden unless ``user.role`` is one of ``roles``."""
    if user.role not in roles:
        raise Forbidden(message)


def require_can_collect(user, donation):
    if not can_collect(user.role, donation.type):
        raise Forbidden(COLLECT_DENIED.get(user.role))
