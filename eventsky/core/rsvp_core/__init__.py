"""
rsvp_core – EventSky service module
Event listing from the RSVP subgraph and on-chain event creation.
"""
__all__ = [
    "rsvp_config",
    "rsvp_errors",
    "rsvp_models",
    "index_client",
    "storage_client",
    "rsvp_contract",
    "rsvp_service",
    "submission",
]
