"""
Storage layer for users and donations.

Handlers never touch ``db.session`` directly; they go through the two
repositories below. Both operations that must be exactly-once are atomic
at the database level:

* ``UserRepository.create`` relies on the unique constraint on ``email``.
* ``DonationRepository.mark_collected`` is a conditional UPDATE that only
  matches rows still ``pending``, so two concurrent collectors cannot
  both win.
"""
from datetime import datetime, timezone
import threading
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from extensions import db
from models import User, Donation, STATUS_PENDING, STATUS_COLLECTED, utcnow
from errors import DuplicateEmail, AlreadyCollected, NotFound


# ==========================================
#  1. USERS
# ==========================================
class UserRepository:

    def create(self, name, email, password_hash, role):
        if self.find_by_email(email) is not None:
            raise DuplicateEmail()

        user = User(name=name, email=email, password_hash=password_hash, role=role)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            db.session.rollback()
            raise DuplicateEmail()
        return user

    def find_by_email(self, email):
        return User.query.filter_by(email=email).first()

    def find_by_email_and_role(self, email, role):
        return User.query.filter_by(email=email, role=role).first()

    def find_by_id(self, user_id):
        return db.session.get(User, user_id)


# ==========================================
#  2. DONATIONS
# ==========================================
class DonationRepository:

    _id_lock = threading.Lock()
    _last_id = 0

    @classmethod
    def _next_id(cls, now):
        """Epoch millis of ``now``, bumped past the last issued id."""
        millis = int(now.timestamp() * 1000)
        with cls._id_lock:
            if millis <= cls._last_id:
                millis = cls._last_id + 1
            cls._last_id = millis
        return str(millis)

    def create(self, donor, donation_type, location, people_fed=None, quantity_kg=None):
        now = datetime.now(timezone.utc)
        donation = Donation(
            id=self._next_id(now),
            donor_id=donor['id'],
            donor_name=donor['name'],
            donor_email=donor['email'],
            type=donation_type,
            people_fed=people_fed,
            quantity_kg=quantity_kg,
            location=location,
            status=STATUS_PENDING,
            timestamp=now.replace(tzinfo=None),
        )
        db.session.add(donation)
        db.session.commit()
        return donation

    def _newest_first(self, query):
        return query.order_by(Donation.timestamp.desc(), Donation.id.desc())

    def list_all(self):
        return self._newest_first(Donation.query).all()

    def find_by_id(self, donation_id):
        return db.session.get(Donation, donation_id)

    def list_by_donor_email(self, email):
        return self._newest_first(Donation.query.filter_by(donor_email=email)).all()

    def list_by_types(self, types, status=None):
        query = Donation.query.filter(Donation.type.in_(list(types)))
        if status is not None:
            query = query.filter(Donation.status == status)
        return self._newest_first(query).all()

    def mark_collected(self, donation_id, collector):
        """
        Compare-and-swap ``pending`` -> ``collected``.

        Raises NotFound if the id is unknown and AlreadyCollected if some
        other request got there first.
        """
        result = db.session.execute(
            update(Donation)
            .where(Donation.id == donation_id, Donation.status == STATUS_PENDING)
            .values(
                status=STATUS_COLLECTED,
                collector_id=collector['id'],
                collector_name=collector['name'],
                collector_email=collector['email'],
                collector_role=collector['role'],
                collected_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        db.session.commit()

        if result.rowcount == 0:
            if self.find_by_id(donation_id) is None:
                raise NotFound('Donation not found')
            raise AlreadyCollected()

        # commit() expired the session, so this reloads the updated row
        return self.find_by_id(donation_id)


users = UserRepository()
donations = DonationRepository()
