from datetime import datetime, timezone
import uuid
from werkzeug.security import check_password_hash
from extensions import db

ROLES = ('donor', 'ngo', 'biogas')
DONATION_TYPES = ('packed', 'fresh', 'organic')

STATUS_PENDING = 'pending'
STATUS_COLLECTED = 'collected'
DONATION_STATUSES = (STATUS_PENDING, STATUS_COLLECTED)


def utcnow():
    # SQLite drops tzinfo, so everything is stored as naive UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_utc(value):
    """Renders a naive UTC datetime as ``2024-05-01T09:30:00.123Z``."""
    if value is None:
        return None
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f'{value.microsecond // 1000:03d}Z'


def new_user_id():
    return uuid.uuid4().hex


# ==========================================
#  1. USER MODEL
# ==========================================
class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(32), primary_key=True, default=new_user_id)
    name = db.Column(db.String(150), nullable=False)
    # Unique constraint is what makes signup atomic.
    email = db.Column(db.String(254), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def snapshot(self):
        """Identity fields copied onto a donation at submission time."""
        return {'id': self.id, 'name': self.name, 'email': self.email}

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'createdAt': isoformat_utc(self.created_at),
        }

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'


# ==========================================
#  2. DONATION MODEL
# ==========================================
class Donation(db.Model):
    __tablename__ = 'donations'

    id = db.Column(db.String(20), primary_key=True)

    # --- DONOR SNAPSHOT (not a live reference) ---
    donor_id = db.Column(db.String(32), nullable=False)
    donor_name = db.Column(db.String(150), nullable=False)
    donor_email = db.Column(db.String(254), nullable=False, index=True)

    type = db.Column(db.String(20), nullable=False, index=True)
    people_fed = db.Column(db.Integer, nullable=True)
    quantity_kg = db.Column(db.Float, nullable=True)
    location = db.Column(db.Text, nullable=False)

    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)

    # --- COLLECTOR SNAPSHOT (set iff status == collected) ---
    collector_id = db.Column(db.String(32), nullable=True)
    collector_name = db.Column(db.String(150), nullable=True)
    collector_email = db.Column(db.String(254), nullable=True)
    collector_role = db.Column(db.String(20), nullable=True)
    collected_at = db.Column(db.DateTime, nullable=True)

    @property
    def is_collected(self):
        return self.status == STATUS_COLLECTED

    def to_dict(self):
        data = {
            'id': self.id,
            'donor': {
                'id': self.donor_id,
                'name': self.donor_name,
                'email': self.donor_email,
            },
            'type': self.type,
            'location': self.location,
            'status': self.status,
            'timestamp': isoformat_utc(self.timestamp),
        }
        # Absent optionals are omitted rather than sent as null
        if self.people_fed is not None:
            data['peopleFed'] = self.people_fed
        if self.quantity_kg is not None:
            data['quantityKg'] = self.quantity_kg
        if self.is_collected:
            data['collector'] = {
                'id': self.collector_id,
                'name': self.collector_name,
                'email': self.collector_email,
                'role': self.collector_role,
            }
            data['collectedAt'] = isoformat_utc(self.collected_at)
        return data

    def __repr__(self):
        return f'<Donation {self.id} {self.type} {self.status}>'
