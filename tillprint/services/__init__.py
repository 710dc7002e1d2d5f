"""Services for tillprint: discovery, identification, connection and receipt encoding."""
