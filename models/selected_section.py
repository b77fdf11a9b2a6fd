from datetime import datetime
from .database import db


class SelectedSection(db.Model):
    """One meeting block of a section in the user's selected schedule."""

    __tablename__ = 'selected_sections'

    id = db.Column(db.Integer, primary_key=True)
    course_code = db.Column(db.String(20), nullable=False, index=True)
    course_title = db.Column(db.String(200), nullable=False, default='')
    section_type = db.Column(db.String(1), nullable=False)  # L, T or P
    section = db.Column(db.String(20), nullable=False)  # e.g., "L1", "P2"
    instructor = db.Column(db.JSON, nullable=False, default=list)
    room = db.Column(db.String(50), nullable=False, default='')
    days = db.Column(db.JSON, nullable=False, default=list)  # e.g., ["M", "W"]
    slots = db.Column(db.JSON, nullable=False, default=list)  # e.g., [3, 4]

    # Ownership
    user_id = db.Column(db.String(100), nullable=True, index=True)
    guest_id = db.Column(db.String(100), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<SelectedSection {self.course_code} {self.section}>'

    def to_dict(self):
        return {
            'id': self.id,
            'course_code': self.course_code,
            'course_title': self.course_title,
            'section_type': self.section_type,
            'section': self.section,
            'instructor': list(self.instructor or []),
            'room': self.room,
            'days': list(self.days or []),
            'slots': list(self.slots or [])
        }

    @classmethod
    def from_option(cls, option, user_id=None, guest_id=None):
        """Build a row from a SectionOption-shaped object."""
        return cls(
            course_code=option.course_code,
            course_title=option.course_title,
            section_type=option.section_type,
            section=option.section,
            instructor=list(option.instructor),
            room=option.room,
            days=list(option.days),
            slots=list(option.slots),
            user_id=user_id,
            guest_id=guest_id
        )


class SelectedScheduleStore:
    """The persisted selected schedule of one owner (user or guest)."""

    def __init__(self, user_id=None, guest_id=None):
        if not user_id and not guest_id:
            raise ValueError('A schedule store needs a user_id or a guest_id')
        self.user_id = user_id
        self.guest_id = guest_id

    def query(self):
        if self.user_id:
            return SelectedSection.query.filter_by(user_id=self.user_id)
        return SelectedSection.query.filter_by(guest_id=self.guest_id)

    def all(self):
        return self.query().order_by(SelectedSection.id).all()

    def _rows(self, sections):
        return [
            SelectedSection.from_option(s, user_id=self.user_id, guest_id=self.guest_id)
            for s in sections
        ]

    def replace(self, sections):
        """Overwrite the whole schedule with the given sections."""
        try:
            self.query().delete(synchronize_session=False)
            db.session.add_all(self._rows(sections))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def add(self, sections):
        try:
            db.session.add_all(self._rows(sections))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def remove_course(self, course_code):
        """Delete every block of a course. Returns the number of rows removed."""
        try:
            removed = self.query().filter_by(course_code=course_code).delete(synchronize_session=False)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return removed
