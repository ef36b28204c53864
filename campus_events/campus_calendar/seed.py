# Sample events used when no collection has ever been persisted.

from datetime import datetime, timedelta
from typing import List, Optional

from campus_events.models.event import EventRecord

# (id, name, days from today, hh, mm, location, category, description, organizer, capacity)
_SAMPLES = [
    (1, "Annual Tech Fest", 5, 10, 0, "Main Auditorium", "technical",
     "Join us for the biggest technical festival of the year with coding competitions, "
     "workshops, and guest lectures.",
     "Computer Science Department", 300),
    (2, "Cultural Night", 3, 18, 30, "College Ground", "cultural",
     "An evening of music, dance, and drama performances by talented students.",
     "Cultural Committee", 500),
    (3, "Machine Learning Workshop", 7, 9, 0, "CS Lab 3", "workshop",
     "Hands-on workshop on ML algorithms and TensorFlow implementation.",
     "AI Club", 50),
    (4, "Inter-College Sports Meet", 10, 8, 0, "Sports Complex", "sports",
     "Annual sports competition with various track and field events.",
     "Sports Department", None),
    (5, "Career Guidance Seminar", 2, 14, 0, "Seminar Hall 2", "academic",
     "Learn about career opportunities and higher education options after graduation.",
     "Placement Cell", 200),
]


def sample_events(now: Optional[datetime] = None) -> List[EventRecord]:
    now = now or datetime.now()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    out = []
    for (eid, name, days, hh, mm, location, category,
         description, organizer, capacity) in _SAMPLES:
        out.append(EventRecord(
            id=eid,
            name=name,
            date=today + timedelta(days=days, hours=hh, minutes=mm),
            location=location,
            category=category,
            description=description,
            organizer=organizer,
            capacity=capacity,
            created=now,
        ))
    return out
