# Blocktrix - An SRS Falling-Block Puzzle Engine
# exceptions.py - Custom exceptions for the game engine

class BlocktrixError(Exception):
    """Base class for engine errors. Gameplay itself never raises these."""
    pass

class ConfigError(BlocktrixError):
    """Custom exception for an invalid GameConfig value."""
    pass

class BoardShapeError(BlocktrixError):
    """Custom exception for a grid that is not width x height or holds unknown tags."""
    pass

class InvalidPieceError(BlocktrixError):
    """Custom exception for an undefined piece type or rotation state."""
    pass

class InvalidMoveError(BlocktrixError):
    """Custom exception for a malformed move request, e.g. a rotation direction other than +/-1."""
    pass
