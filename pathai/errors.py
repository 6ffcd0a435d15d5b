"""
Errors Module
=============

Error taxonomy and boundary validators.

Input validation and malformed-result errors are raised to the caller.
"No path found" is never an error: searches return an empty path with
infinite cost instead.
"""

import logging
import numbers
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class PathAIError(Exception):
    """Base error carrying a machine-readable code and optional context"""

    def __init__(self, code: str, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'message': self.message, 'context': self.context}


class InvalidGridError(PathAIError):
    """Grid missing, empty or malformed"""


class MissingPointsError(PathAIError):
    """Start or end coordinate not supplied"""


class UnknownAlgorithmError(PathAIError):
    """Algorithm name not recognised"""


class UnknownHeuristicError(PathAIError):
    """Heuristic name not recognised"""


class MalformedResultError(PathAIError):
    """A search produced a result that violates the result contract"""


def handle_error(error: BaseException, context: Optional[str] = None) -> PathAIError:
    """
    Log an error and normalise it to a PathAIError.

    Args:
        error: Any exception
        context: Short description of where it happened

    Returns:
        The original PathAIError, or a wrapping UNKNOWN_ERROR
    """
    if isinstance(error, PathAIError):
        logger.error("%s: %s %s", error.code, error.message, error.context)
        return error

    logger.error("%s: %s", context or 'Unknown', error)
    return PathAIError('UNKNOWN_ERROR', str(error), {'original_error': repr(error)})


def validate_grid_state(grid: Any, start: Any, end: Any) -> bool:
    """
    Validate the inputs of a search or replan call.

    Raises:
        InvalidGridError: grid is None, not a grid, or has no cells
        MissingPointsError: start or end is None
    """
    if grid is None or not hasattr(grid, 'shape'):
        raise InvalidGridError('INVALID_GRID', 'Grid state is invalid or not initialized')

    rows, cols = grid.shape
    if rows == 0 or cols == 0:
        raise InvalidGridError('EMPTY_GRID', 'Grid has no cells')

    if start is None or end is None:
        raise MissingPointsError('MISSING_POINTS', 'Start or end point not set',
                                 {'start': start, 'end': end})

    return True


def validate_algorithm_result(result: Any) -> bool:
    """
    Validate the shape of a search result.

    Raises:
        MalformedResultError: result is None, its path is not a list,
            or its elapsed time is not numeric
    """
    if result is None:
        raise MalformedResultError('NULL_RESULT', 'Algorithm returned null result')

    if not isinstance(getattr(result, 'path', None), list):
        raise MalformedResultError('INVALID_PATH', 'Algorithm result path is not a list')

    elapsed = getattr(result, 'elapsed_time', None)
    if isinstance(elapsed, bool) or not isinstance(elapsed, numbers.Real):
        raise MalformedResultError('INVALID_RUNTIME', 'Algorithm result runtime is not a number',
                                   {'elapsed_time': elapsed})

    return True
