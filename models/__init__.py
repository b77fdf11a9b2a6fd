from .database import db
from .selected_section import SelectedSection, SelectedScheduleStore
from .generator_session import GeneratorSession

__all__ = ['db', 'SelectedSection', 'SelectedScheduleStore', 'GeneratorSession']
