"""Top-level package for the WebPlanner remote-call layer.

Every outbound call of the travel planner goes through one retrying
transport whose proxy decision is made per destination host, and every
place name is resolved to coordinates with a labelled fallback when the
geocoder cannot help. Itinerary generation, weather, navigation
estimates, connectivity diagnostics and trip maps are built on top.
"""

__version__ = "0.1.0"
