class IdemixGenError(Exception):
    """Base exception for every failure reported by idemixgen."""

    pass
