from flask import Blueprint, request, jsonify, current_app, g
from models import DONATION_TYPES, DONATION_STATUSES
from repositories import donations
from errors import ValidationError, NotFound
from rules import COLLECTOR_ROLES, visible_types_for, require_role, require_can_collect
from tokens import auth_required
from utils import get_json_body, positive_number

donations_bp = Blueprint('donations', __name__, url_prefix='/donations')

# Which optional quantity applies to which type
PEOPLE_FED_TYPES = ('packed', 'fresh')
QUANTITY_KG_TYPES = ('fresh', 'organic')


# ==========================================
#  1. CREATE DONATION
# ==========================================
@donations_bp.route('', methods=['POST'])
@auth_required
def create_donation():
    user = g.user
    require_role(user, 'donor', message='Only donors can create donations')

    data = get_json_body()

    # 1. Validation
    donation_type = data.get('type')
    location = data.get('location')
    if not donation_type or not isinstance(location, str) or not location.strip():
        raise ValidationError('Type and location are required')

    if donation_type not in DONATION_TYPES:
        raise ValidationError('Invalid donation type')

    people_fed = positive_number(data, 'peopleFed', integer=True)
    quantity_kg = positive_number(data, 'quantityKg')

    # 2. Only keep the figures that mean something for this type
    donation = donations.create(
        donor=user.snapshot(),
        donation_type=donation_type,
        location=location,
        people_fed=people_fed if donation_type in PEOPLE_FED_TYPES else None,
        quantity_kg=quantity_kg if donation_type in QUANTITY_KG_TYPES else None,
    )
    current_app.logger.info('Donor %s created %s donation %s', user.id, donation.type, donation.id)

    return jsonify({
        'message': 'Donation created successfully',
        'donation': donation.to_dict(),
    }), 201


# ==========================================
#  2. LIST ALL (role filtered)
# ==========================================
@donations_bp.route('', methods=['GET'])
@auth_required
def list_donations():
    """
    Every read path applies the same visibility rules:
    donors get their own submissions, collectors get their types.
    """
    user = g.user
    if user.role == 'donor':
        results = donations.list_by_donor_email(user.email)
    else:
        results = donations.list_by_types(visible_types_for(user.role))

    return jsonify({'donations': [d.to_dict() for d in results]}), 200


# ==========================================
#  3. MY DONATIONS (Donor)
# ==========================================
@donations_bp.route('/my-donations', methods=['GET'])
@auth_required
def my_donations():
    user = g.user
    require_role(user, 'donor', message='Only donors can view their donations')

    results = donations.list_by_donor_email(user.email)
    return jsonify({'donations': [d.to_dict() for d in results]}), 200


# ==========================================
#  4. PENDING FEED (NGO / Biogas)
# ==========================================
@donations_bp.route('/pending', methods=['GET'])
@auth_required
def pending_donations():
    """
    Donations a collector may act on, newest first.
    Collected ones are included unless ``?status=pending`` is passed.
    """
    user = g.user
    require_role(user, *COLLECTOR_ROLES)

    status = request.args.get('status')
    if status is not None and status not in DONATION_STATUSES:
        raise ValidationError('Invalid status filter')

    results = donations.list_by_types(visible_types_for(user.role), status=status)
    return jsonify({'donations': [d.to_dict() for d in results]}), 200


# ==========================================
#  5. MARK COLLECTED
# ==========================================
@donations_bp.route('/<donation_id>/collect', methods=['PATCH'])
@auth_required
def collect_donation(donation_id):
    user = g.user
    require_role(user, *COLLECTOR_ROLES,
                 message='Only NGO and Biogas agents can collect donations')

    donation = donations.find_by_id(donation_id)
    if donation is None:
        raise NotFound('Donation not found')

    require_can_collect(user, donation)

    # Atomic; raises AlreadyCollected if another request won
    collector = dict(user.snapshot(), role=user.role)
    donation = donations.mark_collected(donation_id, collector)
    current_app.logger.info('%s %s collected donation %s', user.role, user.id, donation.id)

    return jsonify({
        'message': 'Donation marked as collected successfully',
        'donation': donation.to_dict(),
    }), 200
