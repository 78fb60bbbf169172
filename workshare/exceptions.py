# workshare/exceptions.py
# Small custom exceptions shared across the engine.

class ConfigurationError(ValueError):
    """
    Raised when a parameter map cannot be turned into a usable
    ``ModelConfig`` (non-finite values, a non-positive S-curve steepness,
    or human-capability fractions that rise with task difficulty).
    The engine itself never raises this; only the schema boundary does.
    """
    pass
