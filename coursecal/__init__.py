"""coursecal: schooling course sessions and iCalendar export."""

__version__ = "0.1.0"
