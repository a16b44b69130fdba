"""Digital Offices booking and scheduling backend."""
