"""LinkedIn geo codes the sourcing agent may pass as `geo_codes`."""

AVAILABLE_LOCATIONS: dict[str, int] = {
    "United States": 103644278,
    "San Francisco Bay Area": 90000084,
    "San Francisco": 102277331,
    "New York City Metropolitan Area": 90000070,
    "Greater Seattle Area": 90000091,
    "Greater Boston": 90000007,
    "Los Angeles Metropolitan Area": 90000049,
    "Austin, Texas Metropolitan Area": 90000064,
    "Greater Chicago Area": 90000014,
    "Canada": 101174742,
    "Toronto, Ontario": 100025096,
    "United Kingdom": 101165590,
    "London Area, United Kingdom": 90009496,
    "Germany": 101282230,
    "Berlin": 106967730,
    "France": 105015875,
    "Netherlands": 102890719,
    "India": 102713980,
    "Bengaluru": 105214831,
    "Singapore": 102454443,
    "Australia": 101452733,
}


def format_locations() -> str:
    """Render the location table for the agent's system prompt."""
    return ", ".join(f"{name}: {code}" for name, code in AVAILABLE_LOCATIONS.items())
