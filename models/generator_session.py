from datetime import datetime
from .database import db


class GeneratorSession(db.Model):
    """Transient generator state: chosen courses, constraints and the last ranked list."""

    __tablename__ = 'generator_sessions'

    id = db.Column(db.Integer, primary_key=True)
    courses = db.Column(db.JSON, nullable=False, default=list)  # CourseSelection dicts, in add order
    constraints = db.Column(db.JSON, nullable=True)  # GeneratorConstraints dict, None = defaults
    timetables = db.Column(db.JSON, nullable=False, default=list)  # ranked GeneratedTimetable dicts
    current_index = db.Column(db.Integer, nullable=False, default=0)
    truncated = db.Column(db.Boolean, nullable=False, default=False)

    # Ownership
    user_id = db.Column(db.String(100), nullable=True, index=True)
    guest_id = db.Column(db.String(100), nullable=True, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<GeneratorSession {self.id} - {len(self.courses or [])} courses>'

    @classmethod
    def for_owner(cls, user_id=None, guest_id=None):
        """Fetch the owner's session, creating an empty one on first use."""
        if user_id:
            session_row = cls.query.filter_by(user_id=user_id).first()
        else:
            session_row = cls.query.filter_by(guest_id=guest_id).first()

        if session_row is None:
            session_row = cls(
                courses=[], constraints=None, timetables=[], current_index=0,
                user_id=user_id, guest_id=guest_id
            )
            try:
                db.session.add(session_row)
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        return session_row

    def clear_timetables(self):
        self.timetables = []
        self.current_index = 0
        self.truncated = False

    def to_dict(self):
        return {
            'courses': list(self.courses or []),
            'constraints': self.constraints,
            'timetable_count': len(self.timetables or []),
            'current_index': self.current_index,
            'truncated': self.truncated
        }
