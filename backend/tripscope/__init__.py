"""TripScope: predictive analytics engine for the itinerary admin dashboard."""

__version__ = "0.1.0"
