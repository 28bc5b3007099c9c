from .events import EventDetailView, EventListCreateView
